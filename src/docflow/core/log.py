"""Logging setup."""

from __future__ import annotations

import logging

from . import defaults as D


def configure_logging(level: str | int = D.DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging for a docflow process."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=D.DEFAULT_LOG_FORMAT)
    logging.getLogger("docflow").setLevel(level)
