"""Logging configuration for the fileprobe CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from fileprobe.config.models import LoggingSettings

LOGGER_NAME = "fileprobe"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings,
    *,
    verbose: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Attach handlers to the package logger according to ``settings``.

    Handlers installed by a previous call are replaced, so the function can
    run once per CLI invocation.

    Args:
        settings: Logging section of the effective configuration.
        verbose: Force DEBUG level regardless of ``settings.level``.
        console: Console the rich handler writes to; defaults to stderr.

    Returns:
        logging.Logger: The configured ``fileprobe`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "LOGGER_NAME"]
