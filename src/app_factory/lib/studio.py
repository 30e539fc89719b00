"""
Studio

Server-side state of the project editor: the file explorer selection, the
preview/code tabs, the prompt box and the API log pane. Every action is
forwarded to the LLM client; failures only ever end up as a log line.
"""

from typing import List, Optional, Dict, Any
from urllib.parse import quote

from .blueprint_parser import parse_ai_response
from .event_logger import get_event_logger
from .models import DeviceMode, Project
from .project_store import ProjectStore

TABS = ("preview", "code")
AI_ACTIONS = ("explain", "refactor")

# Older entries beyond this many are dropped when a new line is logged
LOG_HISTORY = 10

CODE_PLACEHOLDER = "// Prompt the architect to generate source code..."

# Characters encodeURIComponent leaves alone besides letters and digits
EXTRA_SAFE = "-_.!~*'()"


class Studio:
    def __init__(self, project_id: str, store: ProjectStore, client, event_logger=None):
        self.project_id = project_id
        self.store = store
        self.client = client
        self.event_logger = event_logger or get_event_logger()

        self.prompt = ""
        self.is_generating = False
        self.device = DeviceMode.PC
        self.active_tab = "preview"
        self.active_file: Optional[str] = None
        self.agent_logs: List[str] = [
            f"Factory linked to {client.primary_provider_name} API.",
            "Awaiting architect blueprint...",
        ]
        self._ensure_active_file()

    @property
    def project(self) -> Project:
        return self.store.get_project(self.project_id)

    def _ensure_active_file(self):
        files = self.project.files
        if files and not self.active_file:
            self.active_file = files[0].path

    def add_log(self, msg: str):
        self.agent_logs = self.agent_logs[-LOG_HISTORY:] + [f"> {msg}"]

    def set_tab(self, tab: str):
        if tab not in TABS:
            raise ValueError(f"Unknown tab '{tab}'")
        self.active_tab = tab

    def set_device(self, device: DeviceMode):
        self.device = device

    def select_file(self, path: str):
        if self.project.get_file(path) is None:
            raise KeyError(path)
        self.active_file = path

    def current_file_content(self) -> str:
        if not self.active_file:
            return ""
        project_file = self.project.get_file(self.active_file)
        return project_file.content if project_file else ""

    def generate(self, prompt: str) -> bool:
        """
        Ask the architect for a new blueprint and replace the project's files.

        Returns:
            True when the project was updated.
        """
        if not prompt.strip():
            return False

        self.prompt = prompt
        self.is_generating = True
        self.add_log(f"POST /api/generate?intent={quote(prompt[:20], safe=EXTRA_SAFE)}...")

        try:
            result = self.client.generate_app_blueprint(prompt)
            generated_files = parse_ai_response(result)

            self.store.replace_files(self.project_id, generated_files)

            self.prompt = ""
            self.active_tab = "code"
            if generated_files:
                self.active_file = generated_files[0].path
            self.add_log("200 OK: Project architecture received.")
            self.event_logger.log_info("BLUEPRINT APPLIED", {
                "project": self.project.name,
                "files": len(generated_files)
            })
            return True
        except Exception as e:
            self.add_log("500 ERROR: API connection lost.")
            self.event_logger.log_error("BLUEPRINT FAILED", {"project": self.project_id, "error": str(e)})
            return False
        finally:
            self.is_generating = False

    def ai_action(self, action: str) -> Optional[str]:
        """
        Run explain or refactor on the active file.

        Returns:
            The explanation for `explain`, the new file content for `refactor`,
            or None when nothing was done or the call failed.
        """
        if action not in AI_ACTIONS:
            raise ValueError(f"Unknown action '{action}'")
        if not self.active_file:
            return None
        project_file = self.project.get_file(self.active_file)
        if project_file is None:
            return None

        path = self.active_file
        self.is_generating = True
        self.add_log(f"POST /api/{action}?file={path}")

        try:
            if action == "refactor":
                result = self.client.refactor_code(path, project_file.content)
                self.store.update_file_content(self.project_id, path, result)
                self.add_log("200 OK: Code refactored.")
            else:
                result = self.client.explain_code(project_file.content)
                self.add_log("200 OK: Explanation generated.")
            return result
        except Exception as e:
            self.add_log("Action failed.")
            self.event_logger.log_error("AI ACTION FAILED", {"action": action, "file": path, "error": str(e)})
            return None
        finally:
            self.is_generating = False

    def preview(self) -> Dict[str, Any]:
        project = self.project
        if project.files:
            return {
                "ready": True,
                "title": f"{project.name} Active",
                "message": "The application components have been successfully rendered in the virtual environment.",
            }
        return {"ready": False, "title": None, "message": "Waiting for API instructions..."}

    def to_dict(self) -> Dict[str, Any]:
        self._ensure_active_file()
        return {
            "project_id": self.project_id,
            "prompt": self.prompt,
            "is_generating": self.is_generating,
            "device": self.device.value,
            "active_tab": self.active_tab,
            "active_file": self.active_file,
            "content": self.current_file_content() or CODE_PLACEHOLDER,
            "agent_logs": list(self.agent_logs),
            "preview": self.preview(),
        }
