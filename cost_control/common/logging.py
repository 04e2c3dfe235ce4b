"""
Logging configuration helpers.
The API calls `configure_logging` once at startup; modules then use `logging.getLogger(__name__)`.
"""

from __future__ import annotations

import logging

from cost_control.common.settings import get_settings

_LOGGING_CONFIGURED = False
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level_name: str | None = None) -> None:
    """Configure process-wide logging from environment settings."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    resolved_name = (level_name or get_settings().LOG_LEVEL).upper()
    level = getattr(logging, resolved_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQLAlchemy echoes every statement at INFO when its logger inherits DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _LOGGING_CONFIGURED = True
