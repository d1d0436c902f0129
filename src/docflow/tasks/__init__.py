"""Task registry: records, cancellation, and progress reporting.

The service facade lives in ``docflow.tasks.service``.
"""

from .cancellation import CancellationRegistry, CancellationToken
from .errors import (
    DuplicateTaskError,
    ErrorKind,
    NonRetriableError,
    TaskCancelledError,
    TaskError,
    UnknownTaskError,
)
from .models import TERMINAL_STATUSES, TaskRecord, TaskStatus
from .progress import BucketSummary, ProgressAggregator, Stage, infer_stage
from .store import TaskStore

__all__ = [
    # Records
    "TaskRecord",
    "TaskStatus",
    "TERMINAL_STATUSES",
    # Store
    "TaskStore",
    "CancellationRegistry",
    "CancellationToken",
    # Reporting
    "BucketSummary",
    "ProgressAggregator",
    "Stage",
    "infer_stage",
    # Errors
    "ErrorKind",
    "TaskError",
    "DuplicateTaskError",
    "UnknownTaskError",
    "TaskCancelledError",
    "NonRetriableError",
]
