"""Logging setup for PagePress.

Library modules log through ``loguru.logger`` and never install sinks.
Entry points (the CLI) call :func:`setup_logging` once.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from pagepress.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the PagePress sinks.

    Args:
        level: Minimum level (default from settings)
        log_file: Optional rotating log file path (default from settings)
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            format=FILE_FORMAT,
            level=level,
            rotation="50 MB",
            retention="30 days",
            compression="zip",
            encoding="utf-8",
        )
