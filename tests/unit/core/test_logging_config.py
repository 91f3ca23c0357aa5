"""Unit tests for structured logging configuration."""

from __future__ import annotations

import logging

import structlog

from core.logging_config import get_logger


def test_get_logger_filters_below_info() -> None:
    """Loggers should drop debug events instead of printing them."""
    get_logger(__name__)

    wrapper_class = structlog.get_config()["wrapper_class"]

    assert wrapper_class is structlog.make_filtering_bound_logger(logging.INFO)
