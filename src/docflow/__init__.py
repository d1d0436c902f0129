"""docflow: task lifecycle and retry coordination for documentation pipelines.

Long-running crawl/synthesize/embed pipelines run in the background while
callers poll, cancel, and clean up through a stateless request/response
layer. docflow keeps the in-memory bookkeeping that makes that possible:

- TaskStore: task records and their status state machine
- RetryExecutor: cancellation-aware retries with backoff and jitter
- ProgressAggregator: a human-readable digest grouped by task type

Usage:
    from docflow import TaskService

    service = TaskService()
    task = service.register_task("get-llms-full", description="fastapi docs")
    result = await service.run_with_retry(fetch, task_id=task.id)
"""

try:
    from importlib.metadata import version as _get_version

    __version__ = _get_version("docflow")
except Exception:
    __version__ = "0.0.0-dev"


# Lazy imports keep ``import docflow`` free of import cycles
def __getattr__(name: str):
    if name == "TaskService":
        from .tasks.service import TaskService

        return TaskService
    if name == "TaskStore":
        from .tasks.store import TaskStore

        return TaskStore
    if name == "RetryExecutor":
        from .worker.retry import RetryExecutor

        return RetryExecutor
    if name == "DocflowConfig":
        from .core.config import DocflowConfig

        return DocflowConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "TaskService",
    "TaskStore",
    "RetryExecutor",
    "DocflowConfig",
]
