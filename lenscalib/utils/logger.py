"""Logging utilities."""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logger(
    name: str = "lenscalib",
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Set up and configure a logger.

    Configuring the package logger ``lenscalib`` also routes the records of
    every ``lenscalib.*`` module logger.

    Args:
        name: Logger name.
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file path for logging.
        console: Whether to log to console.
        format_string: Custom format string.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "lenscalib") -> logging.Logger:
    """
    Get an existing logger or create a basic one.

    A logger whose ancestors already have handlers is returned untouched.

    Args:
        name: Logger name.

    Returns:
        Logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.hasHandlers():
        logger = setup_logger(name)

    return logger


class LoggerMixin:
    """Mixin class to add a module-qualified logger to any class."""

    @property
    def logger(self) -> logging.Logger:
        """Get class-specific logger (no handlers are attached)."""
        if not hasattr(self, "_logger"):
            cls = self.__class__
            self._logger = logging.getLogger(f"{cls.__module__}.{cls.__name__}")
        return self._logger
