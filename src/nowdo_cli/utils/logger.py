"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "nowdo_cli"
_LOG_FILE = "nowdo.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, initialising the file handler on first call.

    ``name`` selects a child logger (``nowdo_cli.<name>``) that shares the
    root application handler.
    """
    global _logger
    if _logger is None:
        log_dir = Path(user_log_dir(_APP_NAME))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / _LOG_FILE

        logger = logging.getLogger(_APP_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        if not _has_file_handler(logger, log_file):
            logger.addHandler(_file_handler(log_file))

        _logger = logger

    if name:
        return _logger.getChild(name)
    return _logger


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    return any(
        isinstance(h, logging.handlers.RotatingFileHandler)
        and Path(h.baseFilename) == log_file.absolute()
        for h in logger.handlers
    )


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler
