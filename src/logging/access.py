"""Structured JSON logging for the HTTP adapter.

Logs go to stdout as JSON lines, with optional file output via the
ACCESS_LOG_FILE env var. The same handlers are attached to uvicorn's
loggers so server lifecycle messages share the format.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from src.config.settings import get_settings

ROOT_LOGGER = "adapter"
ACCESS_LOGGER = "adapter.access"
UVICORN_LOGGER = "uvicorn"

# Request-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={}` kwarg
        if hasattr(record, "audit_data"):
            log_entry.update(record.audit_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the adapter and uvicorn loggers with JSON output."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = JSONFormatter()

    for name in (ROOT_LOGGER, UVICORN_LOGGER):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(formatter)
        logger.addHandler(stdout_handler)

        if settings.access_log_file:
            file_handler = logging.FileHandler(settings.access_log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # Prevent propagation to root logger (avoids duplicate output)
        logger.propagate = False


def get_logger(name: str = "") -> logging.Logger:
    """Logger under the adapter tree, e.g. get_logger("lifecycle")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def get_access_logger() -> logging.Logger:
    return logging.getLogger(ACCESS_LOGGER)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestTimer:
    """Context manager to measure request latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
