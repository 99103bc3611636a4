# === FILE: spider_scout/logger.py ===
"""Logging setup shared by every SpiderScout module.

All modules write through one named logger::

    from spider_scout.logger import logger
    logger.info("Spidered %s - Links %d", url, count)

Until the CLI calls :func:`init_logging` with its own options the logger
prints to stdout at INFO level.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SpiderScout"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

Level = Union[int, str]


def _build_handlers(log_file: Optional[Union[str, Path]], log_format: str) -> List[logging.Handler]:
    formatter = logging.Formatter(log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Send crawl logs to stdout and, when *log_file* is given, a rotating file.

    Level names are case-insensitive.  With *replace_handlers* the previous
    handlers are detached and closed first, so an earlier log file is released.
    """
    crawl_logger = logging.getLogger(LOGGER_NAME)
    crawl_logger.setLevel(level.upper() if isinstance(level, str) else level)

    if replace_handlers:
        for handler in list(crawl_logger.handlers):
            crawl_logger.removeHandler(handler)
            handler.close()

    for handler in _build_handlers(log_file, log_format):
        crawl_logger.addHandler(handler)

    crawl_logger.propagate = False
    return crawl_logger


def init_logging(
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Positional form of :func:`configure` used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
