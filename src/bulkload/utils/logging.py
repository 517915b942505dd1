"""
Structured logging for load runs.

Events go to stderr; stdout belongs to the rich console output of the CLI.
"""

import logging
import sys
from typing import Any

import structlog

from bulkload.config.settings import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """
    Configure structlog from the logging section of a load config.

    SQLAlchemy logs through the standard library; its loggers are kept at
    WARNING or above unless SQL echo is turned on in the database config.

    Args:
        config: Logging configuration (level, JSON output).
    """
    level = logging.getLevelNamesMapping().get(config.level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("sqlalchemy").setLevel(max(level, logging.WARNING))

    renderer: structlog.types.Processor
    if config.json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a module, typically get_logger(__name__)."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """Bind values (e.g. table and source) to every event inside the block."""
    return structlog.contextvars.bound_contextvars(**kwargs)
