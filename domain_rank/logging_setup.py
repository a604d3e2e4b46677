"""Process-wide logging initialisation for applications embedding the rank cache."""

import logging
from typing import Optional

import structlog


def init_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name; defaults to LOG_LEVEL from settings
    """
    if level is None:
        from .config import get_settings
        level = get_settings().LOG_LEVEL
    level = level.upper()
    logging.basicConfig(level=level)
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.TimeStamper(fmt="iso"), structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        cache_logger_on_first_use=True,
    )
