"""TaskStore - in-memory registry of task records and their state machine."""

from __future__ import annotations

import logging
import re
import threading
from uuid import uuid4

from .cancellation import CancellationRegistry, CancellationToken
from .errors import DuplicateTaskError, UnknownTaskError
from .models import TRANSITIONS, TaskRecord, TaskStatus, utc_now

logger = logging.getLogger(__name__)

_PROGRESS_RE = re.compile(r"(\d+)/(\d+)")


class TaskStore:
    """Single source of truth for task records.

    All reads and writes are short critical sections under one lock; none
    of them perform I/O, so the store is safe to call from coroutines and
    threads alike. Callers only ever receive copies of records.
    """

    def __init__(self, cancellation: CancellationRegistry | None = None) -> None:
        self._tasks: dict[str, TaskRecord] = {}
        self._used_ids: set[str] = set()
        self._lock = threading.Lock()
        self.cancellation = cancellation or CancellationRegistry()

    # --- Creation ---

    def create(self, task_id: str, initial_details: str = "", description: str = "") -> TaskRecord:
        """Insert a new queued task.

        Raises:
            DuplicateTaskError: If ``task_id`` exists or was used earlier in
                this process.
        """
        with self._lock:
            if task_id in self._used_ids:
                raise DuplicateTaskError(task_id)
            record = TaskRecord(
                id=task_id,
                details=initial_details,
                description=description,
            )
            self._tasks[task_id] = record
            self._used_ids.add(task_id)
            snapshot = record.snapshot()

        logger.info("Registered new task: %s", task_id)
        return snapshot

    def register(self, prefix: str = "task", description: str | None = None) -> TaskRecord:
        """Create a task with a generated ``{prefix}-{uuid}`` id."""
        return self.create(
            f"{prefix}-{uuid4()}",
            initial_details="Initializing...",
            description=description or prefix,
        )

    # --- Mutation ---

    def update_status(self, task_id: str, status: TaskStatus, details: str | None = None) -> None:
        """Apply a status transition if it is a legal forward move.

        Writes to a terminal task, or backwards moves, are ignored with a
        warning: status races between workers and cancellers are expected.

        Raises:
            UnknownTaskError: If the task does not exist.
        """
        status = TaskStatus(status)
        with self._lock:
            record = self._tasks.get(task_id)
            if record is None:
                raise UnknownTaskError(task_id)

            current = record.status
            if status == current and not current.is_terminal:
                if details is not None:
                    record.details = details
                    record.updated_at = utc_now()
                return
            if status not in TRANSITIONS[current]:
                ignored = True
            else:
                ignored = False
                record.status = status
                if details is not None:
                    record.details = details
                now = utc_now()
                record.updated_at = now
                if status.is_terminal:
                    record.finished_at = now

        if ignored:
            logger.warning(
                "Ignoring status change for task %s: %s -> %s", task_id, current, status
            )
        else:
            logger.info("Updated task %s status to: %s", task_id, status)

    def update_progress(self, task_id: str, current: int, total: int) -> None:
        """Set progress counters; silently ignored for unknown or finished tasks."""
        if current < 0 or total < 0:
            raise ValueError("progress values must be non-negative")
        with self._lock:
            record = self._tasks.get(task_id)
            if record is None or record.is_terminal:
                return
            record.progress_current = current
            record.progress_total = total
            record.updated_at = utc_now()

    def update_details(self, task_id: str, details: str) -> None:
        """Replace the details text.

        While the task is running, an ``N/M`` fragment in the text (with
        M > 0) also updates the progress counters.
        """
        with self._lock:
            record = self._tasks.get(task_id)
            if record is None:
                found = False
            else:
                found = True
                record.details = details
                record.updated_at = utc_now()
                if record.status == TaskStatus.RUNNING:
                    match = _PROGRESS_RE.search(details)
                    if match and int(match.group(2)) > 0:
                        record.progress_current = int(match.group(1))
                        record.progress_total = int(match.group(2))

        if not found:
            logger.warning("Attempted to update details for unknown task ID: %s", task_id)

    # --- Cancellation ---

    def request_cancellation(self, task_id: str) -> TaskStatus | None:
        """Flag a task as cancelled.

        A queued task has no worker yet, so it moves straight to cancelled.
        Running tasks only get the flag; their worker observes it later.

        Returns:
            The task's status after the request, or None for unknown ids.
        """
        with self._lock:
            record = self._tasks.get(task_id)
            if record is None:
                return None
            self.cancellation.request_cancel(task_id)
            record.cancel_requested = True
            eager = record.status == TaskStatus.QUEUED
            if eager:
                now = utc_now()
                record.status = TaskStatus.CANCELLED
                record.updated_at = now
                record.finished_at = now
            status = record.status

        if eager:
            logger.info("Cancelled queued task %s before it started", task_id)
        else:
            logger.info("Cancellation requested for task %s (status: %s)", task_id, status)
        return status

    def is_cancelled(self, task_id: str) -> bool:
        return self.cancellation.is_cancelled(task_id)

    def token(self, task_id: str) -> CancellationToken:
        return self.cancellation.token(task_id)

    # --- Reads ---

    def get(self, task_id: str) -> TaskRecord | None:
        with self._lock:
            record = self._tasks.get(task_id)
            return record.snapshot() if record else None

    def get_all(self, prefix: str | None = None) -> list[tuple[str, TaskRecord]]:
        """Snapshot every task, optionally only ids starting with ``prefix``."""
        with self._lock:
            return [
                (task_id, record.snapshot())
                for task_id, record in self._tasks.items()
                if not prefix or task_id.startswith(prefix)
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks

    # --- Cleanup ---

    def cleanup(self, task_ids: set[str] | list[str] | None = None) -> list[str]:
        """Remove tasks from the store.

        With ``task_ids``, removes exactly those that exist (unknown ids are
        ignored). Without, removes every task in a terminal status; queued
        and running tasks are never touched.

        Returns:
            Ids actually removed.
        """
        with self._lock:
            if task_ids is not None:
                removed = [tid for tid in dict.fromkeys(task_ids) if tid in self._tasks]
            else:
                removed = [tid for tid, rec in self._tasks.items() if rec.is_terminal]
            for tid in removed:
                del self._tasks[tid]
                self.cancellation.discard(tid)

        if removed:
            if task_ids is not None:
                logger.info("Removed %d specified tasks from store.", len(removed))
            else:
                logger.info("Cleaned up %d finished tasks from store.", len(removed))
        return removed
