"""Logging setup for gitstage.

Library modules log through ``structlog.get_logger(__name__)`` and never
configure anything themselves; applications (and the CLI) call
:func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def _log_level_from_string(level: str) -> int:
    """Convert a log level name (debug, info, warning, error) to an int."""
    return logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)


def configure_logging(level: str = "warning", *, stream: TextIO | None = None) -> None:
    """Route structlog output to *stream* (stderr by default) at *level*."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level_from_string(level)),
        # resolve sys.stderr per logger so redirected streams are honoured
        logger_factory=lambda *args: structlog.PrintLogger(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
