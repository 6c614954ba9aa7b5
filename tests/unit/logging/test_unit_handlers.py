# tests/unit/logging/test_handlers.py - v1
"""Tests for logging/handlers.py: size parsing and the rotating handler."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from shellcache.logging.handlers import _parse_size, create_rotating_handler


@pytest.mark.parametrize("text,expected", [
    ("10MB", 10 << 20),
    ("512KB", 512 << 10),
    ("1GB", 1 << 30),
    (" 10 mb ", 10 << 20),
])
def test_parse_size(text, expected):
    assert _parse_size(text) == expected


@pytest.mark.parametrize("text", ["", "10", "10bytes", "MB", "-1MB", "1.5MB"])
def test_parse_size_rejects(text):
    with pytest.raises(ValueError, match="Invalid size"):
        _parse_size(text)


class TestCreateRotatingHandler:
    def test_limits_from_arguments(self, tmp_path):
        handler = create_rotating_handler(tmp_path / "shellcache.log", rotation="1MB", retention=5)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert (handler.maxBytes, handler.backupCount) == (1 << 20, 5)
        finally:
            handler.close()

    def test_parent_dirs_created_and_written(self, tmp_path):
        target = tmp_path / "logs" / "nested" / "shellcache.log"
        handler = create_rotating_handler(str(target))
        try:
            handler.emit(logging.makeLogRecord({"msg": "hello", "levelno": logging.INFO}))
            handler.flush()
        finally:
            handler.close()
        assert "hello" in target.read_text(encoding="utf-8")

    def test_bad_rotation(self, tmp_path):
        with pytest.raises(ValueError):
            create_rotating_handler(tmp_path / "x.log", rotation="big")
