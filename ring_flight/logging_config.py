"""
Logging Configuration
Sets up the package logger for the game.
"""
from __future__ import annotations

import logging
import sys


def setup_logging(level: int | str = logging.INFO, log_file: str | None = None) -> None:
    """
    Configures the logger for the 'ring_flight' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, "INFO").
        log_file: Optional path to save logs to a file.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("ring_flight")
    logger.setLevel(level)

    # Avoid duplicate output when run() is called more than once in a process.
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")
