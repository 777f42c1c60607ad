"""Logging setup: one timestamped file per run under logs/, plain messages on stdout."""

import logging
import sys
from datetime import datetime

import config

LOGGER_NAME = "gradedreader"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logger(
    name: str = LOGGER_NAME,
    log_file: str | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure `name` with a file handler and a console handler.

    `log_file` is relative to config.LOGS_DIR; it defaults to
    generation_<timestamp>.log. Calling again replaces the handlers.
    """
    config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = log_file or f"generation_{datetime.now():%Y%m%d_%H%M%S}.log"
    log_path = config.LOGS_DIR / log_file

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    for handler in (file_handler, console_handler):
        handler.setLevel(level)
        logger.addHandler(handler)

    # The OpenAI SDK logs every request through httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info(f"Log file: {log_path}")
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
