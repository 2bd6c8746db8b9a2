# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import unittest
from unittest.mock import patch

from src.config.logging_config import setup_logging
from src.config.settings import Settings


def _clear_handlers() -> None:
    root_logger = logging.getLogger("buying_list")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the buying_list logger before each test."""
        _clear_handlers()

    def tearDown(self) -> None:
        _clear_handlers()

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_file_handler_level_debug(self) -> None:
        """File handler should be set to DEBUG level."""
        setup_logging()
        root_logger = logging.getLogger("buying_list")
        file_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)

    def test_console_handler_level_warning(self) -> None:
        """Console handler should be set to WARNING level."""
        setup_logging()
        root_logger = logging.getLogger("buying_list")
        stream_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

    def test_console_level_from_settings(self) -> None:
        """Console handler level follows Settings.CONSOLE_LOG_LEVEL."""
        with patch.object(Settings, "CONSOLE_LOG_LEVEL", "info"):
            setup_logging()
        root_logger = logging.getLogger("buying_list")
        levels = [
            h.level for h in root_logger.handlers
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(levels, [logging.INFO])

    def test_unknown_file_level_keeps_default(self) -> None:
        """An unrecognised level name leaves the file handler at DEBUG."""
        with patch.object(Settings, "FILE_LOG_LEVEL", "LOUD"):
            setup_logging()
        root_logger = logging.getLogger("buying_list")
        levels = [
            h.level for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(levels, [logging.DEBUG])

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging()
        root_logger = logging.getLogger("buying_list")
        count_before = len(root_logger.handlers)
        setup_logging()
        self.assertEqual(len(root_logger.handlers), count_before)

    def test_child_loggers_reach_file(self) -> None:
        log_path = setup_logging()
        logging.getLogger("buying_list.pipeline").info("scan finished")
        for handler in logging.getLogger("buying_list").handlers:
            handler.flush()
        self.assertIn("scan finished", log_path.read_text(encoding="utf-8"))

    def test_log_file_inside_logs_dir(self) -> None:
        """Log file is created inside the logs/ directory."""
        log_path = setup_logging()
        self.assertEqual(log_path.parent.name, "logs")


if __name__ == "__main__":
    unittest.main()
