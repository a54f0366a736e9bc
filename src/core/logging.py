"""
structlog setup shared by services and scripts.
"""

import logging
from typing import Optional

import structlog

from src.core.config import EnvironmentSettings


def configure_logging(settings: Optional[EnvironmentSettings] = None) -> None:
    """
    Configure structlog with ISO timestamps and log levels.

    Args:
        settings: Environment settings (defaults to values from .env/environment)
    """
    settings = settings or EnvironmentSettings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
