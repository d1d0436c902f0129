"""Vector store access used by maintenance operations."""

from .base import VectorStore, VectorStoreError
from .sources import SourceRemover

__all__ = [
    "SourceRemover",
    "VectorStore",
    "VectorStoreError",
]
