"""Vector store capability interface."""

from __future__ import annotations

from typing import Protocol

from docflow.tasks.errors import ErrorKind, TaskError


class VectorStoreError(TaskError):
    """Raised when a vector store call fails; ``kind`` decides whether to retry."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.RETRIABLE):
        super().__init__(message, kind=kind)


class VectorStore(Protocol):
    async def delete_by_sources(self, collection: str, sources: list[str]) -> str:
        """Delete every point whose source matches one of ``sources``.

        Returns the operation status reported by the store.
        """
        ...
