"""
App Factory Library

This package contains the core modules behind the factory UI:
- llm_client: the four generative-AI calls with multi-provider fallback
- blueprint_parser: splits model output on [FILE: path] markers
- studio: project editor state (file tree, tabs, prompt, API log)
- build_center: simulated build pipeline with fabricated progress
- project_store: in-memory project registry
"""

from .errors import (
    AppFactoryError, GenerationError, ProjectNotFoundError,
    BuildInProgressError, UnknownTargetError, UnsafePathError
)
from .models import Project, ProjectFile, BuildLog, BuildTarget, DeviceMode, BUILD_TARGETS
