"""
Logging utilities for pydaptivebeamforming.

A single package logger with a colorized stream handler. Numeric-health events
raised inside the per-frame pipeline are reported through it.
"""

import logging
import sys


class ColorFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI color codes to the log levels.
    """

    CYAN = "\x1b[36;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"
    FORMAT = "%(asctime)s [%(levelname)s] [%(name)s/%(filename)s] %(message)s"

    LEVEL_COLORS = {
        logging.DEBUG: CYAN,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        log_color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        formatter = logging.Formatter(
            f"{log_color}{self.FORMAT}{self.RESET}",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        return formatter.format(record)


def get_logger(name: str = "pydaptivebeamforming") -> logging.Logger:
    """
    Returns a logger for the package (or one of its submodules).

    Only the root package logger gets a handler; child loggers such as
    ``pydaptivebeamforming.gsc`` propagate to it.

    Args:
        name: Name of the logger.

    Returns:
        A configured logging.Logger instance.
    """
    logger = logging.getLogger(name)

    if name == "pydaptivebeamforming" and not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColorFormatter())
        logger.addHandler(handler)

    return logger


logger = get_logger()


def set_log_level(level):
    """
    Sets the log level of the package logger.

    Args:
        level: logging.DEBUG, logging.INFO, etc. or a string "DEBUG", "INFO", etc.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
