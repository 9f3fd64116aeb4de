"""Structured logging for reconciliation runs."""

import logging
import sys
from typing import Optional

import structlog

from contact_relations.config import settings


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog processors.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines instead of the console renderer
    """
    level = (level or settings.logging.level).upper()
    if json_output is None:
        json_output = settings.logging.json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Get a structured logger (name is typically __name__)."""
    return structlog.get_logger(name)
