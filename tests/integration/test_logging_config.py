# [TESTER] v1

from __future__ import annotations

import logging
from pathlib import Path

from cpamm.logging_config import LOGGER_NAME, setup_logging


def _reset() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_is_idempotent() -> None:
    try:
        setup_logging()
        logger = setup_logging(level=logging.DEBUG)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
    finally:
        _reset()


def test_setup_logging_writes_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "cpamm.log"
    try:
        setup_logging(log_file=log_file)
        logging.getLogger("cpamm.core.engine").info("hello from the engine")
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "| INFO     | cpamm.core.engine | hello from the engine" in text
    finally:
        _reset()
