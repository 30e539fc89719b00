"""
In-memory project registry.

Projects live for the lifetime of the process only.
"""

import threading
from datetime import datetime
from typing import Dict, List

from .errors import ProjectNotFoundError
from .models import Project, ProjectFile


class ProjectStore:
    def __init__(self):
        self._projects: Dict[str, Project] = {}
        self._lock = threading.Lock()

    def create_project(self, name: str) -> Project:
        project = Project.new(name.strip() or "Untitled App")
        with self._lock:
            self._projects[project.id] = project
        return project

    def list_projects(self) -> List[Project]:
        """Projects ordered by most recent edit first."""
        with self._lock:
            projects = list(self._projects.values())
        return sorted(projects, key=lambda p: p.last_edited, reverse=True)

    def get_project(self, project_id: str) -> Project:
        with self._lock:
            project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def rename_project(self, project_id: str, name: str) -> Project:
        project = self.get_project(project_id)
        project.name = name
        project.last_edited = datetime.now().isoformat()
        return project

    def delete_project(self, project_id: str):
        with self._lock:
            if self._projects.pop(project_id, None) is None:
                raise ProjectNotFoundError(project_id)

    def replace_files(self, project_id: str, files: List[ProjectFile]) -> Project:
        """Swap in a freshly generated file set; the project goes back to draft."""
        project = self.get_project(project_id)
        project.files = list(files)
        project.last_edited = datetime.now().isoformat()
        project.status = "draft"
        return project

    def update_file_content(self, project_id: str, path: str, content: str) -> Project:
        """Replace one file's content, leaving the rest of the project alone."""
        project = self.get_project(project_id)
        project.files = [
            ProjectFile(path=f.path, content=content, language=f.language) if f.path == path else f
            for f in project.files
        ]
        return project
