"""
Mangrove Watch - Logging Configuration
Console logging for the API server and the map export script.
"""

import logging
import sys
from typing import Optional

from mangrove_watch.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "mangrove_watch.console"

# Chatty below WARNING unless debugging
THIRD_PARTY_LOGGERS = (
    "httpx",
    "httpcore",
    "multipart",
    "sqlalchemy.engine",
    "uvicorn.access",
)


def setup_logging(
    settings: Optional[Settings] = None,
    level: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the mangrove_watch logger.

    Safe to call more than once: the console handler is replaced, not
    duplicated.

    Args:
        settings: Settings providing log level, debug and SQL echo flags
            (environment if None)
        level: Log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The package logger
    """
    settings = settings or get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    logger = logging.getLogger("mangrove_watch")
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.set_name(HANDLER_NAME)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    third_party_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    # DATABASE_ECHO shows emitted SQL through the engine logger
    if settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return logger
