"""Loguru sink setup shared by the CLI and scripts."""

from __future__ import annotations

import sys

from loguru import logger

from config import Settings


def configure_logging(settings: Settings) -> None:
    """Replace the default loguru sink with the configured ones."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="5 MB",
            retention=3,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )
