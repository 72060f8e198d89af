"""Logging setup for site_markdown.

Every module logs through the shared ``SiteMarkdown`` logger::

    from site_markdown.logger import logger

The CLI calls :func:`init_logging` once, with the level, format and optional
log file chosen on the command line.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "SiteMarkdown"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# rotate at 5 MiB, keep three old files
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


def init_logging(
    level: int | str = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Reset the project logger to stdout plus an optional rotating file."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(RotatingFileHandler(
            str(log_file), maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        ))
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "LOGGER_NAME"]
