"""
Logging configuration for html_navigator.

The package logger is configured once from Settings when html_navigator is
imported; every module then logs through a child of it, so engine
diagnostics show up as "html_navigator.engine" and so on.
"""

import logging
import os
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER_NAME = "html_navigator"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatted(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: str = PACKAGE_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional log file.

    Calling it again does not stack console handlers: it moves the logger
    and its handlers to the new level and only adds log_file if that file
    is not attached yet.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for logging
        stream: Console stream (default: stdout)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        logger.addHandler(_formatted(logging.StreamHandler(stream or sys.stdout)))

    if log_file:
        attached = {
            handler.baseFilename
            for handler in logger.handlers
            if isinstance(handler, logging.FileHandler)
        }
        if os.path.abspath(log_file) not in attached:
            logger.addHandler(_formatted(logging.FileHandler(log_file)))

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Child logger of the package logger, e.g. "html_navigator.engine".

    Accepts a short name ('engine') or a full dotted name already under the
    package.
    """
    if module_name == PACKAGE_LOGGER_NAME or module_name.startswith(PACKAGE_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{module_name}")
