"""Tests for taskpad.logging_setup module."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from taskpad.logging_setup import LOGGER_NAME, setup_logging


def _own_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger(LOGGER_NAME).handlers if getattr(h, "_taskpad_handler", False)]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_handler_level(self) -> None:
        """Test a rich console handler is installed at the given level."""
        setup_logging("INFO")
        handlers = _own_handlers()
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert handlers[0].level == logging.INFO

    def test_repeated_setup_replaces_handlers(self) -> None:
        """Test calling twice does not duplicate handlers."""
        setup_logging()
        setup_logging()
        assert len(_own_handlers()) == 1

    def test_file_handler(self, tmp_path: Path) -> None:
        """Test the log file receives debug messages."""
        log_file = tmp_path / "logs" / "taskpad.log"
        setup_logging(logging.WARNING, log_file)

        logging.getLogger("taskpad.test").debug("hello from the test")
        for handler in _own_handlers():
            handler.flush()

        assert len(_own_handlers()) == 2
        assert "hello from the test" in log_file.read_text()

        # Drop the file handler so the log file is closed
        setup_logging()
