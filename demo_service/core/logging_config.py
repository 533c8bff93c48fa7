"""
Logging Configuration Module

This module configures process-wide logging for the demo service, with
either a human-readable or a structured (JSON) format. Container runtimes
collect stdout, so everything goes to a single console handler.

Features:
    - Structured JSON format for machine-readable logs
    - Human-readable format with milliseconds (default)
    - uvicorn loggers routed through the same handler
    - Suppression for noisy access loggers

Log Fields (Structured Mode):
    - timestamp: ISO format timestamp (UTC)
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - module: Python module name
    - function: Function name
    - line: Line number
    - listener: (optional) Listener name
    - address: (optional) Bind address
    - exception: (optional) Exception traceback

Usage:
    from demo_service.core.logging_config import setup_logging

    setup_logging(log_level=logging.INFO, use_structured=True)
"""

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Union


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging.

    Outputs log records as JSON objects with consistent field names,
    making logs easy to parse with tools like jq or Loki.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: The log record to format

        Returns:
            JSON string representation of the log record
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        for field in ("listener", "address", "version"):
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """
    Simple human-readable log formatter with milliseconds.

    Format: [TIMESTAMP.mmm] LEVEL:LOGGER:MESSAGE
    """

    def __init__(self):
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s:%(name)s:%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def formatTime(self, record: logging.LogRecord, datefmt: str = None) -> str:
        """Return timestamp in format: YYYY-MM-DD HH:MM:SS.mmm"""
        ct = datetime.fromtimestamp(record.created)
        s = ct.strftime(datefmt or "%Y-%m-%d %H:%M:%S")
        return f"{s}.{int(record.msecs):03d}"


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    use_structured: bool = False
) -> None:
    """
    Configure application logging.

    Replaces any handlers on the root logger with a single stdout handler.

    Args:
        log_level: Minimum log level to capture (default: INFO)
        use_structured: Use JSON format if True, simple format if False
    """
    formatter = StructuredFormatter() if use_structured else SimpleFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    _route_uvicorn_loggers()
    _suppress_noisy_loggers()


def _route_uvicorn_loggers() -> None:
    """Let uvicorn's loggers propagate to the root handler."""
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(logger_name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True


def _suppress_noisy_loggers() -> None:
    """Suppress per-request access logging from the HTTP libraries."""
    noisy_loggers = [
        "uvicorn.access",
        "aiohttp.access",
    ]

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
