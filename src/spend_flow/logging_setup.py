"""
Logging for the spend_flow package.

Modules take a logger from get_logger(); only the CLI calls
configure_logging(). Until then the package logger holds a NullHandler
and stays silent.
"""
import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "spend_flow"
LEVEL_ENV_VAR = "SPEND_FLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Send package logs to stderr. Only the first call has any effect.

    Args:
        level: Level name or number; defaults to $SPEND_FLOW_LOG_LEVEL, then WARNING
    """
    global _configured
    if _configured:
        return

    level = level or os.getenv(LEVEL_ENV_VAR) or logging.WARNING
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
