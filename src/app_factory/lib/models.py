"""
Data types shared by the App Factory modules.
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from .errors import UnknownTargetError


class DeviceMode(Enum):
    """Preview frame selector in the studio."""
    PC = "pc"
    TABLET = "tablet"
    MOBILE = "mobile"


@dataclass
class ProjectFile:
    """A single generated source file."""
    path: str
    content: str
    language: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    """A user project and the files the architect generated for it."""
    id: str
    name: str
    files: List[ProjectFile] = field(default_factory=list)
    last_edited: str = field(default_factory=lambda: datetime.now().isoformat())
    status: str = "draft"

    @classmethod
    def new(cls, name: str) -> "Project":
        return cls(id=uuid.uuid4().hex[:12], name=name)

    def get_file(self, path: str) -> Optional[ProjectFile]:
        for project_file in self.files:
            if project_file.path == path:
                return project_file
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "files": [f.to_dict() for f in self.files],
            "last_edited": self.last_edited,
            "status": self.status,
        }


@dataclass
class BuildLog:
    """One line in the build center's REMOTE_STDOUT pane."""
    id: str
    timestamp: str
    type: str  # 'info', 'success', 'error'
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BuildTarget:
    """A deployment target button in the build center."""
    key: str
    label: str
    arch: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


BUILD_TARGETS = [
    BuildTarget(key="Android APK", label="Android Package (APK)", arch="ARM64-v8a"),
    BuildTarget(key="Windows EXE", label="Windows Executable (EXE)", arch="x64 Desktop"),
]


def get_build_target(key: str) -> BuildTarget:
    """Look up a deployment target by its key."""
    for target in BUILD_TARGETS:
        if target.key == key:
            return target
    raise UnknownTargetError(key)
