"""Task Pydantic models returned by the service layer."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel

from .models import TaskRecord, TaskStatus, utc_now


class DetailLevel(StrEnum):
    SIMPLE = "simple"
    DETAILED = "detailed"


class CancelOutcome(StrEnum):
    NOT_FOUND = "not_found"
    ALREADY_FINISHED = "already_finished"
    CANCELLED = "cancelled"
    CANCELLATION_REQUESTED = "cancellation_requested"


class TaskView(BaseModel):
    id: str
    status: TaskStatus
    details: str
    description: str = ""
    progress_current: int | None = None
    progress_total: int | None = None
    cancel_requested: bool = False
    created_at: datetime
    updated_at: datetime
    finished_at: datetime | None = None
    eta: datetime | None = None

    @classmethod
    def from_record(
        cls,
        record: TaskRecord,
        detail_level: DetailLevel = DetailLevel.SIMPLE,
        now: datetime | None = None,
    ) -> TaskView:
        details = record.details
        if detail_level == DetailLevel.SIMPLE:
            details = simplify_details(details)
        return cls(
            id=record.id,
            status=record.status,
            details=details,
            description=record.description,
            progress_current=record.progress_current,
            progress_total=record.progress_total,
            cancel_requested=record.cancel_requested,
            created_at=record.created_at,
            updated_at=record.updated_at,
            finished_at=record.finished_at,
            eta=estimate_eta(record, now=now),
        )


class CancelResult(BaseModel):
    task_id: str
    outcome: CancelOutcome
    status: TaskStatus | None = None
    message: str = ""


class CancelSummary(BaseModel):
    cancelled: list[str] = []
    already_finished: int = 0
    message: str = ""


def simplify_details(details: str) -> str:
    """Collapse JSON details to their ``message`` (or ``status``) field."""
    try:
        parsed = json.loads(details)
    except (TypeError, ValueError):
        return details
    if isinstance(parsed, dict):
        if parsed.get("message"):
            return str(parsed["message"])
        if parsed.get("status"):
            return str(parsed["status"])
    return details


def estimate_eta(record: TaskRecord, now: datetime | None = None) -> datetime | None:
    """Project a finish time from elapsed time per unit of progress."""
    if record.status != TaskStatus.RUNNING:
        return None
    current, total = record.progress_current, record.progress_total
    if not current or not total or current > total:
        return None
    now = now or utc_now()
    elapsed = (now - record.created_at).total_seconds()
    if elapsed <= 0:
        return None
    remaining = elapsed / current * (total - current)
    return now + timedelta(seconds=remaining)
