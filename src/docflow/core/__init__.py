"""Core module for docflow."""

from . import defaults
from .config import DocflowConfig, RetryConfig, TaskConfig
from .log import configure_logging

__all__ = [
    "defaults",
    "DocflowConfig",
    "RetryConfig",
    "TaskConfig",
    "configure_logging",
]
