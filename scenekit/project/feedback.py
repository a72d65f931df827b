"""
Task feedback sinks - progress reporting for long operations.

The editor shell provides the real sink (a progress bar in the status bar);
the persistence layer only talks to the TaskFeedback protocol.
"""

from __future__ import annotations

import itertools
from typing import Dict, Protocol

from scenekit import log


class TaskFeedback(Protocol):
    def add_task_feedback(self, progress: float, message: str) -> int:
        """Open a task. progress is in percent. Returns a token."""
        ...

    def update_task_feedback(self, token: int, progress: float, message: str | None = None) -> None:
        ...

    def close_task_feedback(self, token: int) -> None:
        ...


class LogTaskFeedback:
    """Default sink: writes progress to the scenekit log."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._messages: Dict[int, str] = {}

    def add_task_feedback(self, progress: float, message: str) -> int:
        token = next(self._ids)
        self._messages[token] = message
        log.info(f"[Task {token}] {message} ({progress:.0f}%)")
        return token

    def update_task_feedback(self, token: int, progress: float, message: str | None = None) -> None:
        if message is not None:
            self._messages[token] = message
        log.debug(f"[Task {token}] {self._messages.get(token, '')} ({progress:.0f}%)")

    def close_task_feedback(self, token: int) -> None:
        self._messages.pop(token, None)
