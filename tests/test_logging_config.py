"""Tests for logging setup."""

import io
import logging

import pytest

from harvester.logging_config import get_logger, parse_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("playwright").setLevel(logging.NOTSET)
    logging.getLogger("asyncio").setLevel(logging.NOTSET)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_parse_level(self):
        """Test level name parsing and rejection of unknown names."""
        assert parse_level("debug") == logging.DEBUG
        assert parse_level(" WARNING ") == logging.WARNING
        with pytest.raises(ValueError):
            parse_level("chatty")

    def test_console_output(self, restore_root_logger):
        """Test that records at or above the level reach the console."""
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)

        get_logger("harvester.test").info("+ saved 1/3 | Laptop X1")
        get_logger("harvester.test").debug("hidden")

        output = stream.getvalue()
        assert "+ saved 1/3 | Laptop X1" in output
        assert "hidden" not in output

    def test_log_file(self, tmp_path, restore_root_logger):
        """Test that the log file carries logger names."""
        log_file = tmp_path / "logs" / "harvest.log"
        setup_logging("INFO", log_file=str(log_file), stream=io.StringIO())

        get_logger("harvester.test").warning("listing not ready")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "harvester.test - WARNING - listing not ready" in content

    def test_noisy_loggers_quieted(self, restore_root_logger):
        """Test that playwright logging stays at WARNING under DEBUG."""
        setup_logging("DEBUG", stream=io.StringIO())
        assert logging.getLogger("playwright").level == logging.WARNING
