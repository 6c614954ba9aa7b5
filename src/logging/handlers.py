# src/logging/handlers.py - v1
"""Size-based rotating file handler for the optional log file."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"(?P<count>\d+)\s*(?P<unit>[KMG]B)", re.IGNORECASE)
_UNIT_SHIFT = {"KB": 10, "MB": 20, "GB": 30}


def _parse_size(size_str: str) -> int:
    """'10MB' -> 10485760. Units are KB, MB or GB, any case."""
    match = _SIZE_RE.fullmatch(size_str.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {size_str!r} (expected e.g. '10MB')")
    return int(match["count"]) << _UNIT_SHIFT[match["unit"].upper()]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Rotate ``log_file`` once it exceeds ``rotation``, keeping ``retention`` backups.

    Missing parent directories are created.
    """
    target = Path(log_file).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        target,
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
