"""Logging configuration for nodup."""

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "nodup"

LOG_FORMAT = "[%(asctime)s] %(levelname)-7s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = ROOT_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # More verbose in file
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt=DATE_FORMAT,
            )
        )
        logger.addHandler(file_handler)

    return logger


def set_level(level: int) -> None:
    """
    Apply a logging level to every nodup logger and its console handlers.

    Args:
        level: Logging level to apply
    """
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)


def parse_level(name: str) -> int:
    """
    Convert a level name such as 'debug' or 'WARNING' to its numeric value.

    Raises:
        ValueError: If the name is not a known logging level
    """
    if name is None:
        raise ValueError("Level name cannot be None")
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {name}")
    return level
