"""Worker-side helpers for pipeline execution."""

from .retry import RetryExecutor

__all__ = ["RetryExecutor"]
