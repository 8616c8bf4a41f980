"""
Configure logging for the application.

This module provides a consistent logging configuration across the entire
application. Output goes to the console only; nothing about a call is
written to disk.
"""

import logging
import os
import sys
from typing import Optional

from convai_bridge.config.constants import LOGGER_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the application logger with a console handler.

    Args:
        level: Log level name; falls back to the LOG_LEVEL environment variable

    Returns:
        logging.Logger: The configured logger instance
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Remove existing handlers if any
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # Prevent log propagation to root logger
    logger.propagate = False

    logger.info("Logging configured")
    return logger
