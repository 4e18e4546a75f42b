"""
Logging Setup - Cocoa Contest Scoring Engine
cocoa_scoring/core/logging.py

Configures structlog on top of the standard logging module.
LOG_FORMAT=json renders one JSON object per event, LOG_FORMAT=console renders
coloured key=value lines for local development.
"""

import logging
import sys

import structlog

from cocoa_scoring.config import settings

_configured = False


def configure_logging(level: str = None, log_format: str = None) -> None:
    """Configure structlog and stdlib logging once per process."""
    global _configured
    if _configured:
        return

    level_name = (level or settings.LOG_LEVEL).upper()
    fmt = log_format or settings.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True
