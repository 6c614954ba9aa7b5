# src/logging/logger.py - v1
"""Logger factory with JSON and text formatters.

Records emitted while a worker instance is active carry its context
(instance id, phase, resource key), see logging/context.py.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shellcache.logging.context import get_context

ROOT_LOGGER = "shellcache"

# Third-party loggers that log every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    ``extra={"data": {...}}`` on a logging call lands under the ``data`` key.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            payload["context"] = context
        data = getattr(record, "data", None)
        if data:
            payload["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Single-line console output: time, level, logger, [phase], (key)."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        head = f"{_timestamp(record):%Y-%m-%d %H:%M:%S} {record.levelname:<8s} {record.name}"
        if ctx.phase:
            head += f" [{ctx.phase}]"
        if ctx.resource_key:
            head += f" ({ctx.resource_key})"
        text = f"{head}: {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, e.g. get_logger("engine") -> shellcache.engine."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Install handlers on the package logger, replacing any previous ones.

    Console output goes to stderr; stdout belongs to CLI command output.
    With ``log_file`` set, records are also written to a size-rotated file
    (``rotation`` like "10MB", ``retention`` backups kept).
    """
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = _FORMATTERS.get(log_format, TextFormatter)()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from shellcache.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
