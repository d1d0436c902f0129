"""Task record models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED})

# Legal forward moves; anything else is ignored by the store.
TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.QUEUED: frozenset({TaskStatus.RUNNING, TaskStatus.CANCELLED}),
    TaskStatus.RUNNING: frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class TaskRecord:
    """One unit of submitted work."""

    id: str
    status: TaskStatus = TaskStatus.QUEUED
    details: str = ""
    description: str = ""
    progress_current: int | None = None
    progress_total: int | None = None
    cancel_requested: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_progress(self) -> bool:
        """True when progress is determinate (a positive total is known)."""
        return bool(self.progress_total) and self.progress_current is not None

    def snapshot(self) -> TaskRecord:
        """Return a detached copy safe to hand to callers."""
        return replace(self)
