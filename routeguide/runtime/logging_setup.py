"""
Logging configuration for the command-line runtime.
"""

import logging
from typing import Optional

from ..errors import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure root logging for the process.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional file to append log records to
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigError(f"Unknown log level: {level}")

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=handlers, force=True)
