"""Exceptions raised by the App Factory library."""


class AppFactoryError(Exception):
    """Base class for App Factory errors."""


class GenerationError(AppFactoryError):
    """Every configured LLM provider failed to produce a usable response."""

    def __init__(self, operation: str, message: str = None):
        self.operation = operation
        super().__init__(message or f"All LLM providers failed for '{operation}'")


class ProjectNotFoundError(AppFactoryError, KeyError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")

    def __str__(self):
        return self.args[0]


class BuildInProgressError(AppFactoryError):
    def __init__(self, project_name: str):
        self.project_name = project_name
        super().__init__(f"A build is already running for '{project_name}'")


class UnknownTargetError(AppFactoryError, ValueError):
    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Unknown build target '{target}'")


class UnsafePathError(AppFactoryError, ValueError):
    def __init__(self, root, path: str):
        self.path = path
        super().__init__(f"Refusing to write outside {root}: {path}")
