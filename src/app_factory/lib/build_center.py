"""
Build Center

Simulated build pipeline. The model invents plausible build stages for the
project's files; each stage is revealed after a short random delay while a
progress percentage climbs to 100. Nothing is compiled.
"""

import asyncio
import itertools
import random
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple, Dict, Any

from .errors import BuildInProgressError
from .event_logger import get_event_logger
from .models import BuildLog, Project

DEFAULT_DELAY_RANGE = (1.0, 2.0)

BuildListener = Callable[[str, Dict[str, Any]], Awaitable[None]]

_log_ids = itertools.count(1)


class BuildCenter:
    def __init__(self, client, delay_range: Tuple[float, float] = DEFAULT_DELAY_RANGE,
                 event_logger=None):
        self.client = client
        self.delay_range = delay_range
        self.event_logger = event_logger or get_event_logger()

        self.logs: List[BuildLog] = []
        self.is_building = False
        self.progress = 0.0
        self.target: Optional[str] = None
        self.listeners: List[BuildListener] = []

    def add_listener(self, listener: BuildListener):
        """Register an async callback receiving `(event, payload)` updates."""
        self.listeners.append(listener)

    async def _notify(self, event: str, payload: Dict[str, Any]):
        for listener in list(self.listeners):
            await listener(event, payload)

    async def add_log(self, log_type: str, message: str):
        """Prepend a log line; the pane shows newest first."""
        log = BuildLog(
            id=f"{int(time.time() * 1000)}-{next(_log_ids)}",
            timestamp=datetime.now().strftime("%H:%M:%S"),
            type=log_type,
            message=message
        )
        self.logs = [log] + self.logs
        await self._notify("build_log", log.to_dict())

    async def set_progress(self, progress: float):
        self.progress = progress
        await self._notify("build_progress", {"progress": round(progress), "is_building": self.is_building})

    async def start_build(self, project: Optional[Project], target: str) -> bool:
        """
        Run the simulated pipeline for a deployment target.

        Returns:
            True when the pipeline reached the final stage.

        Raises:
            BuildInProgressError: if a build is already running here.
        """
        if project is None:
            return False
        if self.is_building:
            raise BuildInProgressError(project.name)

        self.is_building = True
        self.target = target
        self.logs = []
        await self.set_progress(0)
        await self.add_log("info", f"GET /api/build/pipeline?target={target}")

        self.event_logger.log_build_started(project.name, target)
        start_time = time.time()
        steps: List[str] = []
        success = False

        try:
            steps = await asyncio.to_thread(self.client.get_build_pipeline_steps, project.files, target)
            await self.add_log("success", f"Pipeline identified. {len(steps)} build stages mapped.")

            for i, step in enumerate(steps):
                await asyncio.sleep(random.uniform(*self.delay_range))
                await self.add_log("info", step)
                await self.set_progress((i + 1) / len(steps) * 100)

            await self.add_log("success", f"200 OK: {target} binary successfully generated.")
            success = True
        except Exception as e:
            await self.add_log("error", "500 ERROR: Pipeline failure.")
            self.event_logger.log_error("BUILD FAILED", {"project": project.name, "target": target, "error": str(e)})
        finally:
            self.is_building = False
            self.event_logger.log_build_finished(project.name, target, steps, success, time.time() - start_time)
            await self._notify("build_progress", {"progress": round(self.progress), "is_building": False})

        return success

    def status(self) -> Dict[str, Any]:
        return {
            "is_building": self.is_building,
            "progress": round(self.progress),
            "target": self.target,
            "state": "Compiler Busy" if self.is_building else "PIPELINE IDLE",
            "logs": [log.to_dict() for log in self.logs],
        }
