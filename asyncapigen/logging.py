"""Logging helpers shared by the emitter pipeline, CLI and service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

LOGGER_NAME = "asyncapigen"
CONSOLE_FORMAT = "[asyncapigen] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``asyncapigen.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install the console handler (and an optional file sink) on the package logger.

    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_with_format(logging.StreamHandler(stream), level, CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(_with_format(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT))
    return logger


def enable_debug() -> None:
    """Lower the package logger and its handlers to DEBUG for the rest of the process."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)


def _with_format(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "enable_debug", "get_logger"]
