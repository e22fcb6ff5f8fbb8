"""Logging configuration."""

import logging
import sys

from pydantic import BaseModel

APP_LOGGER = "clinic"


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: LogConfig | None = None) -> None:
    """Set up logging for the service.

    Module loggers are created at import time, before settings are read, so
    they carry no level of their own and the configured level is applied to
    the root and ``clinic`` loggers here.
    """
    if config is None:
        config = LogConfig()

    level = getattr(logging, config.level.upper())

    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,  # Override any existing configuration
    )
    logging.getLogger(APP_LOGGER).setLevel(level)

    # Database driver and HTTP client chatter
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Module name (typically __name__)
        level: Explicit level; without one the logger inherits from ``clinic``

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level.upper())
    return logger
