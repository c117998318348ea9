"""Centralized logging configuration for the Kuhn Poker lab."""

from __future__ import annotations

import logging
import os
from typing import Iterable

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
APP_LOGGER = "kuhn_poker"
DEFAULT_LEVEL = "INFO"


def resolve_level(raw: str | None, default: str = DEFAULT_LEVEL) -> str:
    """Upper-cased level name, or ``default`` when *raw* is empty or not a known level."""
    name = (raw or "").strip().upper()
    if name and isinstance(logging.getLevelName(name), int):
        return name
    return default


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    quiet_streamlit: bool = True,
    extra_loggers: Iterable[str] | None = None,
) -> logging.Logger:
    """Configure application logging with sensible defaults.

    Args:
        level: Optional explicit log level. Falls back to ``KUHN_LOG_LEVEL`` env
            var or INFO when not provided or not a known level name.
        format: Log format string.
        datefmt: Date format string.
        quiet_streamlit: Keep Streamlit's own loggers at WARNING or above.
        extra_loggers: Additional logger names to align with the configured level.

    Returns:
        The application logger (``kuhn_poker``).
    """

    raw_level = level if level is not None else os.getenv("KUHN_LOG_LEVEL")
    resolved_level = resolve_level(raw_level)
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(resolved_level)

    if quiet_streamlit:
        streamlit_logger = logging.getLogger("streamlit")
        streamlit_logger.setLevel(max(logging.WARNING, app_logger.getEffectiveLevel()))

    if extra_loggers:
        for logger_name in extra_loggers:
            logging.getLogger(logger_name).setLevel(resolved_level)

    app_logger.debug("Logging configured", extra={"level": resolved_level, "format": format})
    return app_logger
