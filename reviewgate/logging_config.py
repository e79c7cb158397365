"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog


def configure_logging(level: str = "WARNING", stream: TextIO = sys.stderr) -> None:
    """Route structlog events through stdlib logging onto ``stream``.

    Reports are written to stdout, so log output always goes to stderr.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )


def get_logger(name: str) -> Any:
    """Return a structured logger, e.g. ``get_logger(__name__).info("rules_built", count=5)``."""

    return structlog.get_logger(name)
