"""
nftledger - Structured Logging

JSON log output for ledger hosts:
- One JSON object per record
- Correlation IDs via LogContext
- Custom fields from the ``extra`` parameter
"""

import hashlib
import json
import logging
import os
import sys
import threading
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER_NAME = "nftledger"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Context variable for correlation ID
correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "correlation_id"}


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs logs in JSON format

    Features:
    - UTC timestamps
    - Correlation ID support
    - Custom fields passed via ``extra``
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        corr_id = correlation_id.get()
        if corr_id:
            log_entry["correlation_id"] = corr_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class CorrelationIDFilter(logging.Filter):
    """Filter to add correlation ID to log records"""

    def filter(self, record):
        corr_id = correlation_id.get()
        record.correlation_id = corr_id if corr_id else "NO-ID"
        return True


class LogContext:
    """
    Context manager for correlation ID tracking

    Usage:
        with LogContext() as ctx:
            collection.mint(admin, account)
    """

    def __init__(self, custom_id: str = None):
        self.correlation_id = custom_id or self._generate_correlation_id()

    def _generate_correlation_id(self) -> str:
        """Generate unique correlation ID"""
        timestamp = str(time.time()).encode()
        thread_id = str(threading.get_ident()).encode()
        random_data = os.urandom(8)

        return hashlib.sha256(timestamp + thread_id + random_data).hexdigest()[:16]

    def __enter__(self):
        self.token = correlation_id.set(self.correlation_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        correlation_id.reset(self.token)


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a JSON handler to the package logger.

    Calling this again replaces the handler instead of stacking a second one.

    Args:
        level: Minimum log level name
        stream: Output stream (defaults to stderr)

    Returns:
        The configured package logger

    Raises:
        ValueError: If level is not a standard level name
    """
    level_name = str(level).strip().upper()
    if level_name not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level!r}. Must be one of {list(VALID_LOG_LEVELS)}"
        )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name))

    for handler in list(logger.handlers):
        if getattr(handler, "_nftledger_json", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(CorrelationIDFilter())
    handler._nftledger_json = True
    logger.addHandler(handler)
    return logger
