"""
Logging configuration.

Configures loguru sinks for the rewards engine.
"""

import sys

from loguru import logger

from rewards_engine.config.settings import settings


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logger with stderr output and file rotation.

    Args:
        level: Log level (defaults to settings.log_level)
        log_file: Log file path (defaults to settings.log_file, None disables)
    """
    level = (level or settings.log_level).upper()
    log_file = log_file if log_file is not None else settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )

    logger.debug("Logging configured", extra={"level": level, "log_file": log_file})
