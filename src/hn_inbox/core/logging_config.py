"""Logging setup."""

import logging
from typing import Optional


def setup_logger(name: str = "hn_inbox", log_file: Optional[str] = None,
                 level: int = logging.INFO) -> logging.Logger:
    """Configure the package logger with a console and optional file handler."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
