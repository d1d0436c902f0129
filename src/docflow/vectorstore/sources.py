"""Remove indexed documentation by source through the retry executor."""

from __future__ import annotations

import logging

from docflow.tasks.errors import ErrorKind, NonRetriableError
from docflow.worker.retry import RetryExecutor

from .base import VectorStore, VectorStoreError

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "documentation"

_DONE_STATUSES = ("acknowledged", "completed")


class SourceRemover:
    """Deletes all chunks belonging to the given sources."""

    def __init__(
        self,
        store: VectorStore,
        executor: RetryExecutor,
        collection: str = DEFAULT_COLLECTION,
    ):
        self.store = store
        self.executor = executor
        self.collection = collection

    async def remove(self, sources: list[str], task_id: str | None = None) -> str:
        """Remove ``sources`` from the collection.

        Raises:
            NonRetriableError: If ``sources`` is empty or holds blank entries.
            VectorStoreError: If the store keeps failing or rejects credentials.
        """
        if not sources or any(not isinstance(s, str) or not s for s in sources):
            raise NonRetriableError("sources must be a non-empty list of non-empty strings")

        await self.executor.run(
            lambda: self._delete(sources),
            task_id=task_id,
            description=f"remove {len(sources)} source(s) from {self.collection}",
        )
        plural = "s" if len(sources) > 1 else ""
        return (
            f"Successfully removed documentation from {len(sources)} source{plural}: "
            f"{', '.join(sources)}"
        )

    async def _delete(self, sources: list[str]) -> None:
        try:
            status = await self.store.delete_by_sources(self.collection, sources)
        except VectorStoreError:
            raise
        except Exception as e:
            raise _classify(e) from e

        if status not in _DONE_STATUSES:
            raise VectorStoreError(f"Delete operation failed (status: {status})")
        logger.info("Removed %d source(s) from %s", len(sources), self.collection)


def _classify(exc: Exception) -> VectorStoreError:
    message = str(exc)
    if "unauthorized" in message.lower():
        return VectorStoreError(
            "Failed to authenticate with the vector store while removing documentation",
            kind=ErrorKind.NON_RETRIABLE,
        )
    if "ECONNREFUSED" in message or "ETIMEDOUT" in message:
        return VectorStoreError("Connection to the vector store failed while removing documentation")
    return VectorStoreError(f"Failed to remove documentation: {message}")
