import pytest

from app_factory import main as cli


@pytest.fixture
def patched_client(monkeypatch, fake_client):
    monkeypatch.setattr(cli, "FactoryLLMClient", lambda interactive=False: fake_client)
    return fake_client


def test_generate_writes_files(tmp_path, patched_client, capsys):
    out_dir = tmp_path / "todo"

    assert cli.main(["generate", "a todo app", "-o", str(out_dir)]) == 0

    assert (out_dir / "README.md").read_text().startswith("Todo app with filters.")
    assert (out_dir / "src" / "components" / "TodoList.tsx").exists()
    assert "4 file(s) written" in capsys.readouterr().out


def test_build_prints_pipeline(tmp_path, patched_client, capsys):
    (tmp_path / "App.tsx").write_text("export default App;")

    code = cli.main(["build", str(tmp_path), "--target", "Windows EXE", "--min-delay", "0", "--max-delay", "0"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Windows Executable (EXE)" in out
    assert "Pipeline identified. 3 build stages mapped." in out
    assert "200 OK: Windows EXE binary successfully generated." in out
    assert patched_client.calls == [("build_steps", "Windows EXE")]


def test_build_unknown_target(tmp_path, patched_client):
    assert cli.main(["build", str(tmp_path), "--target", "PlayStation"]) == 2


def test_build_failure_exit_code(tmp_path, patched_client):
    (tmp_path / "App.tsx").write_text("x")
    patched_client.failing.add("build_steps")

    assert cli.main(["build", str(tmp_path), "--min-delay", "0", "--max-delay", "0"]) == 1


def test_refactor_in_place(tmp_path, patched_client):
    source = tmp_path / "App.tsx"
    source.write_text("var x = 1")

    assert cli.main(["refactor", str(source), "--in-place"]) == 0
    assert source.read_text() == "const refactored = true;"


def test_explain_prints_bullets(tmp_path, patched_client, capsys):
    source = tmp_path / "App.tsx"
    source.write_text("var x = 1")

    assert cli.main(["explain", str(source)]) == 0
    assert "- it renders" in capsys.readouterr().out


def test_generation_error_exit_code(tmp_path, patched_client, capsys):
    patched_client.failing.add("blueprint")

    assert cli.main(["generate", "x", "-o", str(tmp_path / "out")]) == 1
    assert "All LLM providers failed" in capsys.readouterr().out


def test_missing_file(tmp_path, patched_client):
    assert cli.main(["explain", str(tmp_path / "nope.tsx")]) == 1


def test_serve_forwards_options(monkeypatch):
    from app_factory.webapp import start_web

    calls = []
    monkeypatch.setattr(start_web, "main", lambda **kwargs: calls.append(kwargs))

    assert cli.main(["serve", "--host", "0.0.0.0", "--port", "9000", "-y"]) == 0
    assert calls == [{"host": "0.0.0.0", "port": 9000, "assume_yes": True}]


def test_generate_rejects_paths_outside_output(tmp_path, patched_client, capsys):
    patched_client.blueprint = "[FILE: ok.tsx]\nx\n[FILE: ../../evil.tsx]\ny"
    out_dir = tmp_path / "a" / "b"

    assert cli.main(["generate", "x", "-o", str(out_dir)]) == 1

    assert "Refusing to write outside" in capsys.readouterr().out
    assert not (out_dir / "ok.tsx").exists()
