import logging
import sys
from typing import Iterable, Union

from app.core.config import LOG_LEVEL

# Define log format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers and the level they are capped at
QUIET_LOGGERS = {
    "uvicorn": logging.WARNING,
    "fastapi": logging.WARNING,
    "celery": logging.INFO,
    "kombu": logging.WARNING,
    "amqp": logging.WARNING,
    # Supabase client HTTP stack
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "hpack": logging.WARNING,
    "postgrest": logging.WARNING,
}


def setup_logging(log_level: Union[int, str] = LOG_LEVEL):
    """
    Configure root logging to stdout.

    Args:
        log_level: Level number or name such as "DEBUG"; unknown names fall back to INFO
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, log_level))

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_periods(logger: logging.Logger, periods: Iterable, title: str = "Schedule"):
    """Dump a period grid at DEBUG level, one line per period."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"{title}:")
    for period in periods:
        logger.debug(f"  {period}")
