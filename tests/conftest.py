"""Shared fixtures: a scripted LLM client and an isolated event log."""

import os
import tempfile

# Keep the event log out of the working tree; must happen before app_factory imports
os.environ.setdefault("APP_FACTORY_LOG_FILE", os.path.join(tempfile.mkdtemp(), "app_factory.log"))

import pytest

from app_factory.lib.errors import GenerationError
from app_factory.lib.project_store import ProjectStore

API_KEY_VARS = ["GEMINI_API_KEY", "API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY",
                "OPENROUTER_API_KEY", "APP_FACTORY_PROVIDERS", "APP_FACTORY_DEBUG_DIR"]

BLUEPRINT = """Todo app with filters.

[FILE: src/App.tsx]
export default function App() { return <TodoList />; }

[FILE: src/components/TodoList.tsx]
export function TodoList() { return <ul />; }

[FILE: src/index.css]
@tailwind base;
"""


class FakeFactoryClient:
    """Stands in for FactoryLLMClient with canned answers."""

    primary_provider_name = "Fake"

    def __init__(self, blueprint=BLUEPRINT, steps=None, refactored="const refactored = true;",
                 explanation="- it renders\n- it updates\n- it filters"):
        self.blueprint = blueprint
        self.steps = steps if steps is not None else [
            "Resolving npm dependencies",
            "Transpiling TypeScript with tsc",
            "Bundling assets with Vite",
        ]
        self.refactored = refactored
        self.explanation = explanation
        self.failing = set()
        self.calls = []

    @property
    def available_providers(self):
        return [{"name": "Fake", "type": "fake"}]

    def _check(self, operation):
        if operation in self.failing:
            raise GenerationError(operation)

    def generate_app_blueprint(self, prompt):
        self.calls.append(("blueprint", prompt))
        self._check("blueprint")
        return self.blueprint

    def get_build_pipeline_steps(self, files, target):
        self.calls.append(("build_steps", target))
        self._check("build_steps")
        return list(self.steps)

    def refactor_code(self, path, content):
        self.calls.append(("refactor", path))
        self._check("refactor")
        return self.refactored

    def explain_code(self, content):
        self.calls.append(("explain", content))
        self._check("explain")
        return self.explanation


@pytest.fixture(autouse=True)
def no_api_keys(monkeypatch):
    for name in API_KEY_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client():
    return FakeFactoryClient()


@pytest.fixture
def store():
    return ProjectStore()
