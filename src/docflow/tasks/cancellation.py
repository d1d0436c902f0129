"""Cooperative cancellation flags for running tasks."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .errors import TaskCancelledError


class CancellationRegistry:
    """Tracks which task ids have had cancellation requested.

    TaskStore is the entry point for requests: it checks the id exists and
    discards the flag when the task is removed. Calling request_cancel
    directly flags any id, known to a store or not, until discard() is
    called. The retry executor and workers only read flags; nothing here
    changes a task's status.
    """

    def __init__(self) -> None:
        self._flags: set[str] = set()
        self._lock = threading.Lock()

    def request_cancel(self, task_id: str) -> None:
        with self._lock:
            self._flags.add(task_id)

    def is_cancelled(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._flags

    def discard(self, task_id: str) -> None:
        """Forget the flag for a removed task."""
        with self._lock:
            self._flags.discard(task_id)

    def token(self, task_id: str) -> CancellationToken:
        return CancellationToken(task_id=task_id, registry=self)


@dataclass(frozen=True)
class CancellationToken:
    """Handle a worker polls between operations to observe cancellation."""

    task_id: str
    registry: CancellationRegistry

    @property
    def cancelled(self) -> bool:
        return self.registry.is_cancelled(self.task_id)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TaskCancelledError(self.task_id)
