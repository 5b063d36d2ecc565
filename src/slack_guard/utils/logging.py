"""Structured logging setup (structlog)."""

from __future__ import annotations

import logging
import sys
from typing import Any, List, Optional

import structlog

from slack_guard.config.settings import LoggingSettings


def configure_logging(settings: Optional[LoggingSettings] = None, **overrides: Any) -> None:
    """
    Configure structlog for the application.

    Level and renderer come from LoggingSettings (LOG_LEVEL, LOG_FORMAT);
    keyword overrides (log_level=..., log_format=...) win over the environment.
    """
    settings = settings or LoggingSettings()
    if overrides:
        settings = settings.model_copy(update=overrides)
    # model_copy skips validators, normalise here
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if str(settings.log_format).lower() == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
