"""Logging setup for the aiready CLI and service."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "aiready"
CONSOLE_FORMAT = "[aiready] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``aiready.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _console_handler(level: int) -> logging.Handler:
    # Reports own stdout; diagnostics stay on stderr.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (WARNING, or DEBUG when verbose) and optional file handlers.

    Calling it again replaces the previous handlers.
    """
    console_level = logging.DEBUG if verbose else logging.WARNING
    handlers = [_console_handler(console_level)]
    if log_file is not None:
        handlers.append(_file_handler(log_file))

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(min(handler.level for handler in handlers))
    logger.propagate = False
    return logger


__all__ = ["configure_logging", "get_logger"]
