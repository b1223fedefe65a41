"""Loguru sink setup for command-line entry points."""

import sys
from typing import Optional

from loguru import logger

from terminalvelocity.utils.config import get_log_level

LOG_FORMAT = "{time:HH:mm:ss} | {level: <7} | {name}:{line} - {message}"


def configure_logging(level: Optional[str] = None) -> int:
    """Replace the default loguru sink with a stderr sink at ``level``.

    Library modules only emit; this is called once by entry points.

    Returns:
        The loguru sink id
    """
    logger.remove()
    return logger.add(sys.stderr, level=(level or get_log_level()).upper(), format=LOG_FORMAT)
