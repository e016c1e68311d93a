"""Structured logging setup.

The library emits events through structlog loggers filtered at
``Settings.LOG_LEVEL``, so debug events stay silent by default even when the
application never configures structlog. Applications that want the default
rendering call ``configure_logging()`` once at startup.
"""

import logging
from typing import Any, Optional

import structlog

from objvalidator.config import Settings, get_settings


def log_level(settings: Settings) -> int:
    """Numeric level for ``settings.LOG_LEVEL``."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.LOG_LEVEL!r}")
    return level


def get_logger(settings: Optional[Settings] = None) -> Any:
    """Library logger that drops events below the configured level.

    Processors and output still come from the global structlog config, which
    this never changes.
    """
    settings = settings or get_settings()
    return structlog.wrap_logger(
        None,
        wrapper_class=structlog.make_filtering_bound_logger(log_level(settings)),
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        settings: Optional settings. If None, uses get_settings().
    """
    settings = settings or get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if settings.LOG_JSON else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level(settings)),
        cache_logger_on_first_use=False,
    )
