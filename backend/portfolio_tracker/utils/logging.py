# backend/portfolio_tracker/utils/logging.py
"""
Logging configuration for the portfolio tracker.

setup_logging() is called once from main.py before the FastAPI app is
created. It installs a single stdout handler with:
- text or JSON output (LOG_FORMAT)
- the request correlation ID on every record
- yfinance and HTTP client chatter pinned to WARNING

Log Levels:
    DEBUG   - Cache hits/misses, raw provider payload sizes
    INFO    - Business events (position opened, sell recorded, list deleted)
    WARNING - Degraded data (fundamentals omitted, synthetic quote served)
    ERROR   - Failures requiring attention (provider down, DB unreachable)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from portfolio_tracker.config import settings
from portfolio_tracker.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "-"

NOISY_LOGGERS = [
    "yfinance",
    "peewee",
    "urllib3",
    "urllib3.connectionpool",
    "requests",
    "curl_cffi",
    "httpx",
    "httpcore",
]

# LogRecord attributes that are not user-supplied "extra" fields
_STANDARD_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})


# =============================================================================
# FILTER AND FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the current correlation ID (or "-")."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation in production.

    Fields: timestamp, level, logger, correlation_id, message, and
    "exception"/"extra" when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to settings.log_level
        log_format: "text" or "json"; defaults to settings.log_format
        suppress_noisy_loggers: Pin third-party loggers to WARNING

    Raises:
        ValueError: If the level name is unknown
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)
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
        f"Logging configured: level={log_level_str}, format={format_type}"
    )


def _get_log_level(level_str: str) -> int:
    """Convert a level name (case-insensitive) to a logging constant."""
    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    normalized = level_str.upper().strip()
    if normalized not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. Valid levels are: {valid_levels}"
        )

    return level_mapping[normalized]
