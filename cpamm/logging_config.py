"""
Logging setup for hosts embedding the pool engine.

Library modules only call `logging.getLogger(__name__)`; nothing is configured
until a host calls `setup_logging`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "cpamm"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the package logger with a console handler and an optional file.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        level: Logging level for the package logger and its handlers
        log_file: Optional path of a UTF-8 log file (parent dirs are created)
    """
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_file)
    return logger
