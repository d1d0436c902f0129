"""Tests for logging setup."""

from __future__ import annotations

import logging

import pytest

from docflow.core.log import configure_logging


@pytest.fixture(autouse=True)
def restore_level():
    logger = logging.getLogger("docflow")
    previous = logger.level
    yield
    logger.setLevel(previous)


def test_configure_logging_sets_package_level():
    configure_logging("debug")
    assert logging.getLogger("docflow").level == logging.DEBUG


def test_configure_logging_accepts_int():
    configure_logging(logging.WARNING)
    assert logging.getLogger("docflow").level == logging.WARNING


def test_unknown_level_name_falls_back_to_info():
    configure_logging("chatty")
    assert logging.getLogger("docflow").level == logging.INFO
