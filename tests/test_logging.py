"""Tests for logging configuration."""

from __future__ import annotations

import logging
import logging.handlers

from webmarkdown.config import LoggingSettings
from webmarkdown.logging import configure_logging


def test_console_only_without_log_dir():
    configure_logging(LoggingSettings(level="warning"))

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)


def test_rotating_file_handler_with_log_dir(tmp_path):
    log_dir = tmp_path / "logs"
    configure_logging(LoggingSettings(level="INFO", log_dir=str(log_dir), max_log_file_size_mb=1, backup_count=2))

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert log_dir.is_dir()
    assert handlers and handlers[0].maxBytes == 1024 * 1024
    assert handlers[0].backupCount == 2

    configure_logging(LoggingSettings())
