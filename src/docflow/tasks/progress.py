"""Progress digest across all tasks, grouped by task type."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from .models import TaskRecord, TaskStatus
from .store import TaskStore

UNKNOWN_BUCKET = "unknown"
NO_TASKS_MESSAGE = "No tasks found in the store."


class Stage(StrEnum):
    CRAWL = "Crawl"
    SYNTHESIZE = "Synthesize"
    EMBED = "Embed"
    UNKNOWN = "Unknown"


# An explicit "<Stage> Stage:" label wins; otherwise the first stage with a
# matching marker.
_STAGE_LABEL_RE = re.compile(r"\b(crawl|synthesize|embed) stage:", re.IGNORECASE)

STAGE_MARKERS: tuple[tuple[Stage, tuple[str, ...]], ...] = (
    (Stage.CRAWL, ("crawl",)),
    (Stage.SYNTHESIZE, ("synthesiz", "synthesis")),
    (Stage.EMBED, ("embed", "upsert", "chunk")),
)


def infer_stage(details: object) -> Stage:
    """Guess the pipeline stage from a task's details text.

    Presentation only; never raises, whatever ``details`` holds.
    """
    if not isinstance(details, str) or not details:
        return Stage.UNKNOWN
    label = _STAGE_LABEL_RE.search(details)
    if label:
        return Stage(label.group(1).capitalize())
    haystack = details.lower()
    for stage, markers in STAGE_MARKERS:
        if any(marker in haystack for marker in markers):
            return stage
    return Stage.UNKNOWN


@dataclass
class BucketSummary:
    """Status tally for one task type."""

    name: str
    total: int = 0
    completed: int = 0
    running: int = 0
    queued: int = 0
    failed: int = 0
    cancelled: int = 0
    stage: Stage | None = None
    progress_current: int | None = None
    progress_total: int | None = None

    def count(self, record: TaskRecord) -> None:
        self.total += 1
        match record.status:
            case TaskStatus.COMPLETED:
                self.completed += 1
            case TaskStatus.RUNNING:
                self.running += 1
            case TaskStatus.QUEUED:
                self.queued += 1
            case TaskStatus.FAILED:
                self.failed += 1
            case TaskStatus.CANCELLED:
                self.cancelled += 1

    @property
    def title(self) -> str:
        return f"{self.name[:1].upper()}{self.name[1:]} Tasks:"

    def render(self) -> str:
        running = f"- Running: {self.running}"
        extras = []
        if self.stage is not None:
            extras.append(f"Stage: {self.stage}")
        if self.progress_total:
            extras.append(f"Progress: [{self.progress_current or 0}/{self.progress_total}]")
        if extras:
            running += f" ({', '.join(extras)})"

        lines = [
            self.title,
            f"- Total: {self.total}",
            f"- Completed: {self.completed}",
            running,
            f"- Queued: {self.queued}",
        ]
        if self.failed:
            lines.append(f"- Failed: {self.failed}")
        if self.cancelled:
            lines.append(f"- Cancelled: {self.cancelled}")
        return "\n".join(lines)


class ProgressAggregator:
    """Read-only reporter over a TaskStore."""

    def __init__(self, store: TaskStore, pipeline_prefix: str = "get-llms-full"):
        self.store = store
        self.pipeline_bucket = pipeline_prefix.rstrip("-")
        self._pipeline_prefix = f"{self.pipeline_bucket}-"

    def classify(self, task_id: str) -> str:
        if task_id.startswith(self._pipeline_prefix):
            return self.pipeline_bucket
        return UNKNOWN_BUCKET

    def summarize(self) -> list[BucketSummary]:
        """Tally the current snapshot.

        The pipeline bucket always comes first; the unknown bucket is
        included only when it has members.
        """
        pipeline = BucketSummary(self.pipeline_bucket)
        unknown = BucketSummary(UNKNOWN_BUCKET)
        running_pipeline: list[TaskRecord] = []

        for task_id, record in sorted(self.store.get_all(), key=lambda item: item[0]):
            if self.classify(task_id) == self.pipeline_bucket:
                pipeline.count(record)
                if record.status == TaskStatus.RUNNING:
                    running_pipeline.append(record)
            else:
                unknown.count(record)

        if running_pipeline:
            current = running_pipeline[0]
            pipeline.stage = infer_stage(current.details)
            if current.has_progress:
                pipeline.progress_current = current.progress_current
                pipeline.progress_total = current.progress_total

        buckets = [pipeline]
        if unknown.total:
            buckets.append(unknown)
        return buckets

    def render(self) -> str:
        buckets = [b for b in self.summarize() if b.total]
        if not buckets:
            return NO_TASKS_MESSAGE
        return "\n\n".join(bucket.render() for bucket in buckets)
