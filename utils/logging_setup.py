"""Logging configuration for Payday Budget."""
import logging
import sys

from utils.constants import LOGGER_NAME


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, e.g. get_logger('recurring')."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
