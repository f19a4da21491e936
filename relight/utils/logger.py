"""Logging helpers.

Library modules only ask for loggers; handlers are installed by the CLI.
"""

import logging
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER = "relight"


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``relight`` namespace."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None, console: bool = False) -> None:
    """Configure the package logger.

    Args:
        level: Level name (DEBUG, INFO, ...)
        log_file: Optional path; records are appended to it
        console: Render records on stderr with Rich. Only useful when the TUI
            is not running, since it owns the terminal.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)

    if console:
        logger.addHandler(RichHandler(show_path=False, markup=False))
