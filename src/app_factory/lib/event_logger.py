"""
Factory Event Logger

Writes structured `message | key: value` lines for API calls, provider
fallbacks and simulated build runs to a log file.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_FILE = "app_factory.log"


class FactoryEventLogger:
    """Handles logging of factory API calls and build runs to a file."""

    def __init__(self, log_file: Optional[str] = None):
        self.log_file = Path(log_file or os.getenv("APP_FACTORY_LOG_FILE", DEFAULT_LOG_FILE))

        self.logger = logging.getLogger("app_factory.events")
        self.logger.setLevel(logging.INFO)

        # One file handler per log path, even if several loggers are created
        if not any(getattr(h, "baseFilename", None) == os.path.abspath(self.log_file)
                   for h in self.logger.handlers):
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.INFO)

            formatter = logging.Formatter(
                "%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @staticmethod
    def _format(message: str, data: dict = None) -> str:
        if data:
            formatted_data = " | ".join([f"{k}: {v}" for k, v in data.items()])
            return f"{message} | {formatted_data}"
        return message

    def log_info(self, message: str, data: dict = None):
        """Log an info message with optional structured data."""
        self.logger.info(self._format(message, data))

    def log_warning(self, message: str, data: dict = None):
        self.logger.warning(self._format(message, data))

    def log_error(self, message: str, data: dict = None):
        self.logger.error(self._format(message, data))

    def log_api_call(self, operation: str, provider: str, success: bool, elapsed_time: float):
        """Log a single provider call for one of the factory operations."""
        self.log_info("API CALL", {
            "operation": operation,
            "provider": provider,
            "status": "SUCCESS" if success else "FAILED",
            "elapsed_time_seconds": round(elapsed_time, 2)
        })

    def log_provider_failure(self, operation: str, provider: str, reason: str):
        # Keep multi-line provider errors on one log line
        cleaned = reason.replace("\n", " | ").replace("\r", "")[:500]
        self.log_warning("PROVIDER FALLBACK", {
            "operation": operation,
            "provider": provider,
            "reason": cleaned
        })

    def log_build_started(self, project_name: str, target: str):
        self.log_info("BUILD STARTED", {"project": project_name, "target": target})

    def log_build_finished(self, project_name: str, target: str, steps: List[str],
                           success: bool, elapsed_time: float):
        """Log a summary of a simulated build run."""
        self.log_info("BUILD SUMMARY", {
            "project": project_name,
            "target": target,
            "stages": len(steps),
            "final_result": "SUCCESS" if success else "FAILED",
            "elapsed_time_seconds": round(elapsed_time, 1)
        })


_event_logger: Optional[FactoryEventLogger] = None


def get_event_logger() -> FactoryEventLogger:
    """Get or create the shared event logger."""
    global _event_logger
    if _event_logger is None:
        _event_logger = FactoryEventLogger()
    return _event_logger
