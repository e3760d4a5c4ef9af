"""Logging setup for the command-line scanner.

Handlers go on the ``omr_scanner`` package logger rather than the root
logger, so embedding applications keep control of their own output.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "omr_scanner"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

_installed: list[logging.Handler] = []


def coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    return numeric


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    *,
    console: bool = True,
) -> logging.Logger:
    """Route scanner logs to stdout and, if given, a rotating log file.

    Calling it again replaces the handlers installed by the previous call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    reset_logging()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed.append(handler)

    logger.setLevel(coerce_level(level))
    return logger


def reset_logging() -> None:
    """Detach and close the handlers installed by :func:`configure_logging`."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


__all__ = ["configure_logging", "reset_logging", "coerce_level", "LOG_FORMAT"]
