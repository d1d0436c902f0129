"""Task service - boundary operations over one store, reporter and executor."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from docflow.core.config import DocflowConfig
from docflow.worker.retry import RetryExecutor

from .models import TaskRecord, TaskStatus
from .progress import ProgressAggregator
from .store import TaskStore
from .views import CancelOutcome, CancelResult, CancelSummary, DetailLevel, TaskView

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL_TASK_TYPES = "all"


class TaskService:
    """Facade used by protocol handlers.

    Everything is injected; build a fresh service (or store) per test.
    """

    def __init__(
        self,
        store: TaskStore | None = None,
        config: DocflowConfig | None = None,
        executor: RetryExecutor | None = None,
    ):
        self.config = config or DocflowConfig()
        self.store = store or TaskStore()
        self.executor = executor or RetryExecutor(self.store.cancellation, self.config.retry)
        self.aggregator = ProgressAggregator(self.store, self.config.tasks.pipeline_prefix)

    # --- Lifecycle ---

    def create_task(self, task_id: str, initial_details: str = "") -> TaskRecord:
        return self.store.create(task_id, initial_details)

    def register_task(self, prefix: str = "task", description: str | None = None) -> TaskRecord:
        return self.store.register(prefix, description)

    def set_status(self, task_id: str, status: TaskStatus, details: str | None = None) -> None:
        self.store.update_status(task_id, status, details)

    def set_progress(self, task_id: str, current: int, total: int) -> None:
        self.store.update_progress(task_id, current, total)

    def update_details(self, task_id: str, details: str) -> None:
        self.store.update_details(task_id, details)

    def request_cancellation(self, task_id: str) -> None:
        self.store.request_cancellation(task_id)

    def cleanup(self, task_ids: str | Iterable[str] | None = None) -> list[str]:
        if isinstance(task_ids, str):
            task_ids = {task_ids}
        return self.store.cleanup(set(task_ids) if task_ids is not None else None)

    # --- Reads ---

    def get_task(self, task_id: str) -> TaskRecord | None:
        return self.store.get(task_id)

    def list_tasks(self) -> list[TaskRecord]:
        return [record for _, record in self.store.get_all()]

    def task_details(self, task_id: str) -> str | None:
        record = self.store.get(task_id)
        if record is None:
            logger.info("Task %s not found when retrieving details.", task_id)
            return None
        return record.details or ""

    def task_status(
        self, task_id: str, detail_level: DetailLevel = DetailLevel.SIMPLE
    ) -> TaskView | None:
        record = self.store.get(task_id)
        return TaskView.from_record(record, DetailLevel(detail_level)) if record else None

    def task_statuses(
        self,
        task_type: str = ALL_TASK_TYPES,
        detail_level: DetailLevel = DetailLevel.SIMPLE,
    ) -> dict[str, TaskView]:
        """Views of every task, optionally only those of one type (id prefix)."""
        prefix = None if task_type == ALL_TASK_TYPES else f"{task_type.rstrip('-')}-"
        level = DetailLevel(detail_level)
        views = {
            task_id: TaskView.from_record(record, level)
            for task_id, record in self.store.get_all(prefix)
        }
        logger.info("Found %d tasks matching filter '%s'.", len(views), task_type)
        return views

    def render_progress_summary(self) -> str:
        return self.aggregator.render()

    # --- Cancellation ---

    def cancel_task(self, task_id: str) -> CancelResult:
        """Cancel one task and describe what happened."""
        current = self.store.get(task_id)
        if current is None:
            logger.warning("Task %s not found during cancellation attempt.", task_id)
            return CancelResult(
                task_id=task_id,
                outcome=CancelOutcome.NOT_FOUND,
                message=f"Task {task_id} not found.",
            )
        if current.is_terminal:
            return CancelResult(
                task_id=task_id,
                outcome=CancelOutcome.ALREADY_FINISHED,
                status=current.status,
                message=(
                    f"Task {task_id} is already finished or cancelled "
                    f"(status: {current.status})."
                ),
            )

        status = self.store.request_cancellation(task_id)
        if status == TaskStatus.CANCELLED:
            return CancelResult(
                task_id=task_id,
                outcome=CancelOutcome.CANCELLED,
                status=status,
                message=f"Task {task_id} was queued and has been cancelled.",
            )
        return CancelResult(
            task_id=task_id,
            outcome=CancelOutcome.CANCELLATION_REQUESTED,
            status=status,
            message=f"Cancellation requested for task {task_id}. It will stop shortly.",
        )

    def cancel_all(self, prefixes: Iterable[str] | None = None) -> CancelSummary:
        """Cancel every active task whose id starts with one of ``prefixes``."""
        wanted = tuple(
            f"{p.rstrip('-')}-" for p in (prefixes or self.config.tasks.cancel_all_prefixes)
        )
        cancelled: list[str] = []
        already_finished = 0
        for task_id, record in self.store.get_all():
            if not task_id.startswith(wanted):
                continue
            if record.is_terminal:
                already_finished += 1
                continue
            result = self.cancel_task(task_id)
            if result.outcome in (CancelOutcome.CANCELLED, CancelOutcome.CANCELLATION_REQUESTED):
                cancelled.append(task_id)
            else:
                already_finished += 1

        message = (
            f"Cancellation requested for {len(cancelled)} active task(s). "
            f"{already_finished} task(s) were already finished or cancelled."
        )
        logger.info(message)
        return CancelSummary(cancelled=cancelled, already_finished=already_finished, message=message)

    # --- Retry ---

    async def run_with_retry(
        self,
        operation: Callable[[], Awaitable[T] | T],
        max_attempts: int | None = None,
        initial_delay: float | None = None,
        task_id: str | None = None,
        description: str = "operation",
    ) -> T:
        return await self.executor.run(
            operation,
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            task_id=task_id,
            description=description,
        )
