"""structlog configuration for neuralnetlib."""

from __future__ import annotations

import logging
import os

import structlog

LOG_LEVEL_ENV = "NEURALNETLIB_LOG_LEVEL"


def configure_logging(level: str | int | None = None, *, json: bool = False) -> None:
    """Install the library's structlog pipeline.

    ``level`` falls back to ``$NEURALNETLIB_LOG_LEVEL`` and then ``WARNING``.
    """

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


__all__ = ["LOG_LEVEL_ENV", "configure_logging"]
