"""Logging setup shared by the DoMate CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from domate.config.models import LoggingSettings

LOGGER_NAME = "domate"
_HANDLER_NAME = "domate-file"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """Attach a rotating file handler to the package logger.

    Calling this more than once replaces the previously installed handler, so
    repeated CLI invocations in one process do not duplicate log lines.

    Args:
        settings: Logging section of the active configuration.

    Returns:
        logging.Logger: The configured ``domate`` logger.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.level)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    log_path = Path(settings.file_path).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("Unable to open log file %s: %s", log_path, exc)
        return logger

    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
