"""Structlog configuration.

Diagnostics go to **stderr** so that stdout carries only the check
report.  Importing the package installs a WARNING-level stderr default;
call :func:`configure_logging` at startup to change the level.  Modules
obtain their logger with ``structlog.get_logger()`` at import time.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING") -> None:
    """Configure structlog to render key/value events at *level* and above."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper()),
        ),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def configure_default_logging() -> None:
    """Send events to stderr at WARNING unless logging is already configured.

    Runs on package import so the library never logs through structlog's
    stdout default, even when :func:`configure_logging` is never called.
    """
    if not structlog.is_configured():
        configure_logging("WARNING")
