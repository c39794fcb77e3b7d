# backend/twr_service/utils/logging.py
"""
Logging configuration for the Time-Weighted Return service.

Root logger configuration:
- Level taken from LOG_LEVEL (DEBUG shows per-calculation details)
- Correlation ID on every record
- Text format for development, JSON format for log aggregation
- Third-party chatter (uvicorn access log, httpx, slowapi) held at WARNING

Usage:
    from twr_service.utils import setup_logging

    # Once, from twr_service.main
    setup_logging()

Log Levels:
    DEBUG   - Per-calculation detail (sub-period count, failure reasons)
    INFO    - Startup, one summary line per TWR request
    WARNING - Rejected requests (validation errors, rate limits)
    ERROR   - Unexpected failures

Environment Configuration:
    LOG_LEVEL=DEBUG       # Development - see every calculation
    LOG_LEVEL=INFO        # Production
    LOG_FORMAT=json       # Machine-readable logs
    LOG_FORMAT=text       # Human-readable logs (default)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from twr_service.config import settings
from twr_service.utils.context import get_correlation_id

# Text format: timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "-"

# Third-party loggers quieted to WARNING
NOISY_LOGGERS = [
    "uvicorn.access",
    "httpx",
    "httpcore",
    "asyncio",
    "slowapi",
]

# LogRecord attributes that are not user-supplied "extra" fields
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"correlation_id", "message", "asctime"}


class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that stamps each record with the current correlation ID.

    Access in format strings as %(correlation_id)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123456+00:00",
        "level": "DEBUG",
        "logger": "twr_service.services.twr.calculator",
        "correlation_id": "abc-123-def",
        "message": "TWR: linked 3 sub-periods ...",
        "extra": { ... }  // Any extra= fields passed to the logger
    }

    Non-JSON values in extra (Decimal, date) are rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str)


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure root logging with correlation ID support.

    Call once at application startup. Calling again replaces the handler
    instead of stacking a second one.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.log_format.
        suppress_noisy_loggers: Set third-party loggers to WARNING.

    Raises:
        ValueError: If level is not a valid log level name
    """
    level_name = level or settings.log_level
    log_level = _get_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name.upper()}, format={format_type}"
    )


def _get_log_level(level_name: str) -> int:
    """
    Convert a level name to its logging constant.

    Raises:
        ValueError: If level_name is not a valid log level
    """
    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    normalized = level_name.upper().strip()
    if normalized not in level_mapping:
        raise ValueError(
            f"Invalid log level: '{level_name}'. "
            f"Valid levels are: {', '.join(level_mapping)}"
        )

    return level_mapping[normalized]
