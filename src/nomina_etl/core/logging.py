"""Loguru sink setup for the ETL run.

Modules log through ``from loguru import logger``; this only decides where
records go.
"""

from __future__ import annotations

import sys

from loguru import logger

from nomina_etl.core.config import AppSettings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss}|{level: <8}|{process.id}|{name}.{function}:{line}|{message}"


def configure_logging(settings: AppSettings) -> None:
    """Replace loguru's default sink with the configured console/file sinks."""
    logger.remove()
    logger.add(
        sys.stdout,
        level=settings.log_level,
        colorize=settings.log.colorize,
        format=CONSOLE_FORMAT,
    )

    log_dir = settings.log.log_dir
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "nomina-etl.log",
            level=settings.log.file_level,
            rotation=settings.log.rotation,
            retention=settings.log.retention,
            format=FILE_FORMAT,
        )
