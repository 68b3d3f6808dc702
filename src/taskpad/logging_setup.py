"""Logging configuration for taskpad."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "taskpad"

# Marks handlers installed here so repeated setup replaces them
_HANDLER_FLAG = "_taskpad_handler"


def setup_logging(level: int | str = logging.WARNING, log_file: str | Path | None = None) -> None:
    """Configure the ``taskpad`` logger.

    - Console: rich handler on stderr at ``level``
    - File (optional): everything from DEBUG up

    Safe to call more than once; earlier taskpad handlers are removed.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_FLAG, True)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        setattr(file_handler, _HANDLER_FLAG, True)
        logger.addHandler(file_handler)
