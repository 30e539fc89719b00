#!/usr/bin/env python3
"""
Progress Loader System

Animated terminal indicators for the CLI: a spinner while waiting on the
model and a determinate bar for the simulated build pipeline.
"""

import sys
import time
import threading
import atexit
from typing import Optional, List, TextIO
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum


class LoaderStyle(Enum):
    """Different styles of progress loaders."""
    SPINNER = "spinner"
    THINKING = "thinking"


@dataclass
class LoaderConfig:
    """Configuration for a progress loader."""
    task_name: str
    style: LoaderStyle = LoaderStyle.SPINNER
    update_interval: float = 0.15
    show_elapsed: bool = True
    stream: Optional[TextIO] = None  # sys.stdout at write time when unset


ANIMATIONS = {
    LoaderStyle.SPINNER: ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"],
    LoaderStyle.THINKING: ["🤔", "💭", "🧠", "⚡", "🤖", "🎯"],
}


def render_progress_bar(percent: float, width: int = 30) -> str:
    """Render a determinate progress bar such as `[██████░░░░]  60%`."""
    percent = max(0.0, min(100.0, percent))
    filled = int(round(width * percent / 100))
    return f"[{'█' * filled}{'░' * (width - filled)}] {round(percent):3d}%"


class ProgressLoader:
    """
    Animated progress loader that keeps the terminal active.

    Runs the animation on a daemon thread; `stop()` clears the line and
    optionally prints a completion message with the elapsed time.
    """

    def __init__(self, config: LoaderConfig):
        self.config = config
        self.is_running = False
        self.thread: Optional[threading.Thread] = None
        self.start_time: Optional[float] = None
        self.current_frame = 0
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def start(self):
        """Start the progress loader animation."""
        with self._lock:
            if self.is_running:
                return
            self.is_running = True
            self.start_time = time.time()
            self._stop_event.clear()
            self.current_frame = 0
            self.thread = threading.Thread(target=self._animate, daemon=True)
            self.thread.start()

    def stop(self, success_message: Optional[str] = None):
        """Stop the progress loader and optionally show a success message."""
        with self._lock:
            if not self.is_running:
                return
            self.is_running = False
            self._stop_event.set()

        # Join outside the lock, the animation thread takes it too
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=0.5)

        out = self._out()
        out.write("\r" + " " * 120 + "\r")
        if success_message:
            elapsed = time.time() - (self.start_time or 0)
            out.write(f"✅ {success_message} ({elapsed:.1f}s)\n")
        out.flush()

    def render_line(self) -> str:
        frames = self._get_animation_frames()
        frame = frames[self.current_frame % len(frames)]
        with self._lock:
            task_name = self.config.task_name
            show_elapsed = self.config.show_elapsed
        elapsed_str = ""
        if show_elapsed:
            elapsed_str = f" ({time.time() - (self.start_time or time.time()):.1f}s)"

        line = f"\r{frame} {task_name}{elapsed_str}"
        if len(line) > 115:
            line = line[:112] + "..."
        return line

    def _animate(self):
        """Animation loop that runs in a separate thread."""
        try:
            while not self._stop_event.is_set():
                line = self.render_line()
                if self.is_running:
                    self._out().write(line)
                    self._out().flush()
                self.current_frame = (self.current_frame + 1) % len(self._get_animation_frames())
                if self._stop_event.wait(self.config.update_interval):
                    break
        except (OSError, ValueError):
            # stdout closed underneath us
            pass
        finally:
            with self._lock:
                self.is_running = False

    def _out(self) -> TextIO:
        return self.config.stream or sys.stdout

    def _get_animation_frames(self) -> List[str]:
        return ANIMATIONS.get(self.config.style, ANIMATIONS[LoaderStyle.SPINNER])


class ProgressManager:
    """
    Central manager for all progress loaders.

    Only the innermost loader animates; when it finishes, the one below it on
    the stack resumes.
    """

    def __init__(self):
        self.loader_stack: List[ProgressLoader] = []
        self._manager_lock = threading.Lock()

    @contextmanager
    def show_progress(self, task_name: str, style: LoaderStyle = LoaderStyle.SPINNER):
        """Context manager for showing progress during a task."""
        loader = ProgressLoader(LoaderConfig(task_name=task_name, style=style))

        try:
            with self._manager_lock:
                if self.loader_stack:
                    self.loader_stack[-1].stop()
                self.loader_stack.append(loader)

            loader.start()
            yield loader

        finally:
            loader.stop()

            with self._manager_lock:
                if loader in self.loader_stack:
                    self.loader_stack.remove(loader)
                if self.loader_stack and not self.loader_stack[-1].is_running:
                    self.loader_stack[-1].start()

    def cleanup_all(self):
        """Stop every loader, e.g. before streaming model tokens to stdout."""
        with self._manager_lock:
            for loader in self.loader_stack[:]:
                loader.stop()
            self.loader_stack.clear()


# Global progress manager instance
progress_manager = ProgressManager()


@contextmanager
def show_progress(task_name: str, style: LoaderStyle = LoaderStyle.SPINNER):
    """Show progress for a task."""
    with progress_manager.show_progress(task_name, style) as loader:
        yield loader


@contextmanager
def llm_progress(provider_name: str = "AI"):
    """Show progress for LLM API calls."""
    with progress_manager.show_progress(f"🤖 Calling {provider_name} API", LoaderStyle.THINKING) as loader:
        yield loader


atexit.register(progress_manager.cleanup_all)
