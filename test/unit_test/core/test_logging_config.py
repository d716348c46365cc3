"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from opsboard.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    LOG_LEVEL,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler():
    root_logger = logging.getLogger()
    return next(
        (
            h
            for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ),
        None,
    )


def _file_handlers():
    return [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root_logger = logging.getLogger()
    saved = root_logger.handlers[:]
    saved_level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if handler not in saved:
            handler.close()
    for handler in saved:
        root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
            ("debug", logging.DEBUG),  # Test lowercase
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        """Test setup_logging configures correct log level."""
        setup_logging(log_level=log_level, enable_file=False)

        console_handler = _console_handler()
        assert console_handler is not None
        assert console_handler.level == expected_level

    def test_setup_logging_default_level(self):
        """Test setup_logging falls back to the configured level."""
        setup_logging(enable_file=False)
        assert logging.getLevelName(_console_handler().level) == LOG_LEVEL

    def test_setup_logging_root_logger_level_is_debug(self):
        setup_logging(log_level="ERROR", enable_file=False)
        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    """Test setup_logging with different formats."""

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format

    def test_setup_logging_format_with_timestamp(self):
        setup_logging(log_format="detailed", enable_file=False)
        assert _console_handler().formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandler:
    """Test file logging."""

    def test_setup_logging_with_file_enabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "nested" / "logs"
            with (
                patch("opsboard.core.logging_config.LOG_FILE_DIR", str(log_dir)),
                patch("opsboard.core.logging_config.ENABLE_FILE_LOGGING", True),
            ):
                setup_logging(enable_file=True)

            handlers = _file_handlers()
            assert len(handlers) == 1
            assert handlers[0].level == logging.DEBUG
            assert Path(handlers[0].baseFilename) == log_dir / "opsboard.log"
            assert log_dir.is_dir()

    def test_setup_logging_with_file_disabled(self):
        with patch("opsboard.core.logging_config.ENABLE_FILE_LOGGING", True):
            setup_logging(enable_file=False)
        assert _file_handlers() == []

    def test_setting_disables_file_logging(self):
        with patch("opsboard.core.logging_config.ENABLE_FILE_LOGGING", False):
            setup_logging(enable_file=True)
        assert _file_handlers() == []


class TestSetupLoggingHandlers:
    def test_setup_logging_removes_existing_handlers(self):
        extra = logging.StreamHandler()
        logging.getLogger().addHandler(extra)

        setup_logging(enable_file=False)

        assert extra not in logging.getLogger().handlers

    def test_setup_logging_called_multiple_times(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1


class TestModuleLogLevels:
    @pytest.mark.parametrize(
        "module_name,expected_level",
        [
            ("opsboard.reports", "DEBUG"),
            ("opsboard.reports.runner", "INFO"),
            ("opsboard.functions", "INFO"),
            ("sqlalchemy.engine", "WARNING"),
            ("httpx", "WARNING"),
        ],
    )
    def test_module_specific_log_levels(self, module_name, expected_level):
        setup_logging(enable_file=False)
        assert MODULE_LOG_LEVELS[module_name] == expected_level
        assert logging.getLogger(module_name).level == getattr(logging, expected_level)


class TestGetLogger:
    def test_get_logger_returns_logger_instance(self):
        logger = get_logger("opsboard.reports.fetcher")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "opsboard.reports.fetcher"

    def test_get_logger_same_name_returns_same_instance(self):
        assert get_logger("opsboard.test") is get_logger("opsboard.test")

    def test_logger_can_be_used_for_logging(self, caplog):
        logger = get_logger("opsboard.reports.custom")
        with caplog.at_level(logging.INFO, logger="opsboard.reports.custom"):
            logger.info("Report sent")
        assert "Report sent" in caplog.text
