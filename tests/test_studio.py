import pytest

from app_factory.lib.models import DeviceMode, ProjectFile
from app_factory.lib.studio import Studio, CODE_PLACEHOLDER


@pytest.fixture
def project(store):
    return store.create_project("Todo")


@pytest.fixture
def studio(project, store, fake_client):
    return Studio(project.id, store, fake_client)


def test_initial_state(studio):
    assert studio.agent_logs == ["Factory linked to Fake API.", "Awaiting architect blueprint..."]
    assert studio.active_tab == "preview"
    assert studio.device == DeviceMode.PC
    assert studio.active_file is None
    assert studio.to_dict()["content"] == CODE_PLACEHOLDER
    assert studio.preview() == {"ready": False, "title": None, "message": "Waiting for API instructions..."}


def test_first_file_is_activated_for_existing_projects(project, store, fake_client):
    store.replace_files(project.id, [ProjectFile("a.ts", "a", "typescript"), ProjectFile("b.ts", "b", "typescript")])
    studio = Studio(project.id, store, fake_client)
    assert studio.active_file == "a.ts"


def test_log_history_is_bounded(studio):
    for i in range(20):
        studio.add_log(f"line {i}")

    assert len(studio.agent_logs) == 11
    assert studio.agent_logs[-1] == "> line 19"
    assert studio.agent_logs[0] == "> line 9"


def test_generate_replaces_files(studio, store, project, fake_client):
    assert studio.generate("A todo app with filters") is True

    updated = store.get_project(project.id)
    assert [f.path for f in updated.files] == [
        "README.md", "src/App.tsx", "src/components/TodoList.tsx", "src/index.css"
    ]
    assert updated.status == "draft"
    assert studio.prompt == ""
    assert studio.active_tab == "code"
    assert studio.active_file == "README.md"
    assert studio.is_generating is False
    assert studio.agent_logs[-2] == "> POST /api/generate?intent=A%20todo%20app%20with%20filt..."
    assert studio.agent_logs[-1] == "> 200 OK: Project architecture received."
    assert fake_client.calls == [("blueprint", "A todo app with filters")]


def test_blank_prompt_is_ignored(studio, fake_client):
    assert studio.generate("   ") is False
    assert fake_client.calls == []
    assert len(studio.agent_logs) == 2


def test_generate_failure_keeps_project(studio, store, project, fake_client):
    store.replace_files(project.id, [ProjectFile("keep.ts", "x", "typescript")])
    fake_client.failing.add("blueprint")

    assert studio.generate("anything") is False

    assert [f.path for f in store.get_project(project.id).files] == ["keep.ts"]
    assert studio.agent_logs[-1] == "> 500 ERROR: API connection lost."
    assert studio.prompt == "anything"
    assert studio.is_generating is False


def test_refactor_updates_active_file(studio, store, project):
    studio.generate("todo")
    studio.select_file("src/App.tsx")

    result = studio.ai_action("refactor")

    assert result == "const refactored = true;"
    assert store.get_project(project.id).get_file("src/App.tsx").content == "const refactored = true;"
    assert store.get_project(project.id).get_file("src/index.css").content == "@tailwind base;"
    assert studio.agent_logs[-2] == "> POST /api/refactor?file=src/App.tsx"
    assert studio.agent_logs[-1] == "> 200 OK: Code refactored."


def test_explain_returns_text(studio, fake_client):
    studio.generate("todo")

    assert studio.ai_action("explain") == fake_client.explanation
    assert studio.agent_logs[-1] == "> 200 OK: Explanation generated."


def test_action_without_active_file_is_noop(studio, fake_client):
    assert studio.ai_action("explain") is None
    assert fake_client.calls == []


def test_action_failure_is_logged(studio, fake_client):
    studio.generate("todo")
    fake_client.failing.add("explain")

    assert studio.ai_action("explain") is None
    assert studio.agent_logs[-1] == "> Action failed."


def test_unknown_action_and_tab_are_rejected(studio):
    with pytest.raises(ValueError):
        studio.ai_action("deploy")
    with pytest.raises(ValueError):
        studio.set_tab("terminal")
    with pytest.raises(KeyError):
        studio.select_file("missing.ts")


def test_preview_after_generation(studio):
    studio.generate("todo")
    preview = studio.preview()
    assert preview["ready"] is True
    assert preview["title"] == "Todo Active"


def test_blank_blueprint_becomes_single_app_file(studio, store, project, fake_client):
    fake_client.blueprint = "   \n"

    assert studio.generate("anything") is True

    assert [f.path for f in store.get_project(project.id).files] == ["App.tsx"]
    assert studio.active_file == "App.tsx"
    assert studio.agent_logs[-1] == "> 200 OK: Project architecture received."
