"""Logging utilities with rich console output.

Every module logs through a child of the ``bookmark2vault`` logger. That
package logger owns the single rich handler, so records print once and still
propagate to the root logger (pytest's ``caplog`` relies on this).

Usage:
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.info("Wrote %s", path)
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "bookmark2vault"

console = Console(stderr=True)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
        logger.propagate = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger that writes through the package's rich handler.

    Args:
        name: Logger name (typically ``__name__`` of the module). The level
            comes from the package logger (``LOG_LEVEL`` or INFO).
    """
    _package_logger()
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure package logging once, at the CLI entry point.

    ``LOG_LEVEL`` in the environment overrides ``level``. With ``log_file``,
    records are also appended to that file.
    """
    level = os.getenv("LOG_LEVEL", level).upper()
    logger = _package_logger()
    logger.setLevel(level)

    if log_file:
        path = os.path.abspath(log_file)
        if any(
            isinstance(h, logging.FileHandler) and h.baseFilename == path
            for h in logger.handlers
        ):
            return
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
