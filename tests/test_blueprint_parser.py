from app_factory.lib.blueprint_parser import (
    parse_ai_response, strip_code_fences, detect_language, summarize_files
)
from app_factory.lib.models import ProjectFile


def test_preface_becomes_readme_and_markers_become_files():
    text = "# Notes app\nA tiny notes app.\n[FILE: src/App.tsx]\nconst a = 1;\n[FILE: styles/main.css]\nbody {}\n"
    files = parse_ai_response(text)

    assert [f.path for f in files] == ["README.md", "src/App.tsx", "styles/main.css"]
    assert files[0].language == "markdown"
    assert files[0].content == "# Notes app\nA tiny notes app."
    assert files[1].content == "const a = 1;"
    assert files[1].language == "typescript"
    assert files[2].language == "css"


def test_blank_preface_is_skipped():
    files = parse_ai_response("\n   \n[FILE: a.ts]\nlet x;")
    assert [f.path for f in files] == ["a.ts"]


def test_marker_path_is_trimmed_and_empty_body_allowed():
    files = parse_ai_response("[FILE:  src/empty.tsx ]")
    assert files[0].path == "src/empty.tsx"
    assert files[0].content == ""


def test_response_without_markers_is_readme_only():
    files = parse_ai_response("just some prose")
    assert len(files) == 1
    assert files[0].path == "README.md"


def test_blank_response_falls_back_to_app_tsx():
    files = parse_ai_response("   ")
    assert files == [ProjectFile(path="App.tsx", content="   ", language="typescript")]


def test_fenced_file_bodies_are_unwrapped():
    files = parse_ai_response("[FILE: App.tsx]\n```tsx\nexport default 1;\n```\n")
    assert files[0].content == "export default 1;"


def test_detect_language():
    assert detect_language("a/b/c.tsx") == "typescript"
    assert detect_language("c.ts") == "typescript"
    assert detect_language("package.json") == "json"
    assert detect_language("Dockerfile") == "Dockerfile"
    assert detect_language("weird.") == "typescript"


def test_strip_code_fences_keeps_inner_fences():
    content = "Use it like:\n```js\nrun()\n```\nDone."
    assert strip_code_fences(content) == content
    assert strip_code_fences("```\nplain\n```") == "plain"
    assert strip_code_fences("") == ""


def test_summarize_files_truncates_content():
    files = [ProjectFile("a.ts", "x" * 150, "typescript"), ProjectFile("b.css", "body{}", "css")]
    summary = summarize_files(files)

    assert summary == (
        f"File: a.ts\nContent Summary: {'x' * 100}...\n"
        "File: b.css\nContent Summary: body{}..."
    )
