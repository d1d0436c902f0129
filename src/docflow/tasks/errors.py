"""Task lifecycle errors.

Every error carries an explicit ``kind`` set where it is raised, so the
retry executor never has to guess whether another attempt could help.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    RETRIABLE = "retriable"
    NON_RETRIABLE = "non_retriable"


class TaskError(Exception):
    """Base class for task lifecycle errors."""

    kind: ErrorKind = ErrorKind.RETRIABLE

    def __init__(self, message: str, kind: ErrorKind | None = None):
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class DuplicateTaskError(TaskError):
    """Raised when creating a task whose id is already taken."""

    kind = ErrorKind.NON_RETRIABLE

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} already exists")


class UnknownTaskError(TaskError):
    """Raised when mutating a task id that was never created."""

    kind = ErrorKind.NON_RETRIABLE

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class TaskCancelledError(TaskError):
    """Raised when cancellation is observed for a task."""

    kind = ErrorKind.NON_RETRIABLE

    def __init__(self, task_id: str, message: str = ""):
        self.task_id = task_id
        super().__init__(message or f"Task {task_id} cancelled.")


class NonRetriableError(TaskError):
    """A failure that no amount of retrying can fix (e.g. malformed input)."""

    kind = ErrorKind.NON_RETRIABLE


def error_kind(exc: BaseException) -> ErrorKind:
    """Return the declared kind of ``exc``; undeclared errors are retriable."""
    kind = getattr(exc, "kind", ErrorKind.RETRIABLE)
    return kind if isinstance(kind, ErrorKind) else ErrorKind.RETRIABLE
