"""Logging configuration for uml2spring."""

import logging
import sys
from pathlib import Path
from typing import Optional
from .settings import get_settings

# Console lines stay short; the log file keeps source locations
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """
    Configure the ``uml2spring`` logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for file logging
        format_string: Optional format used by both handlers
        verbose: Force DEBUG, overriding level and settings
    """
    settings = get_settings()
    log_level = "DEBUG" if verbose else (level or settings.log_level)
    numeric_level = getattr(logging, log_level.upper())
    log_file_path = log_file or settings.log_file

    package_logger = logging.getLogger("uml2spring")
    package_logger.setLevel(numeric_level)
    package_logger.handlers.clear()

    # stdout carries CLI output only
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT))
    package_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
        package_logger.addHandler(file_handler)

    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if not logging.getLogger("uml2spring").handlers:
        setup_logging()

    if name.startswith("uml2spring"):
        return logging.getLogger(name)
    return logging.getLogger(f"uml2spring.{name}")
