"""
Module: logger.py
Description: Structured logging configuration for ezhook.

Provides consistent structured logging across all modules. Importing
the library leaves the host application's structlog setup alone;
call configure_logging() to opt in to ezhook's JSON output.

Key Components:
- JSON output for log aggregation
- Timestamp and log level processors
- Level filtering driven by EZHOOK_LOG_LEVEL
- configure_logging() and get_logger() helper functions

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone
from typing import IO, Optional

import structlog

from ezhook.config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """
    Configure structlog for ezhook's JSON output.

    Args:
        level: Minimum log level name; defaults to settings.log_level
        stream: Text stream to write to; defaults to stdout

    Raises:
        ValueError: If level is not a known logging level name
    """
    level = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        # Drop records below the configured level before any processor runs
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Webhook delivered", status_code=204)
        {"event": "Webhook delivered", "status_code": 204, "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
