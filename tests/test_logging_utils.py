"""
Unit tests for logging configuration.
"""

import logging

import pytest

from framecount.utils.logging_utils import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Test root logger configuration."""

    def test_sets_level(self):
        """Verify the named level is applied."""
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self):
        """Verify unknown level names use WARNING."""
        configure_logging("chatty")
        assert logging.getLogger().level == logging.WARNING

    def test_log_file_handler(self, tmp_path):
        """Verify records also go to the log file."""
        log_file = tmp_path / "logs" / "framecount.log"
        configure_logging("INFO", log_file)
        logging.getLogger("framecount.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_quiets_http_loggers(self):
        """Verify HTTP client loggers stay at WARNING or above."""
        configure_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
