"""Centralized logging configuration helpers."""

from __future__ import annotations

import logging
from typing import Optional

from .config import get_settings

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Return a logger with the project handler attached.

    ``level`` overrides ``ZOLD_LOG_LEVEL`` for this logger; calling again
    with a new level re-levels an already configured logger.
    """

    logger = logging.getLogger(name or "zold_http")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    logger.setLevel((level or get_settings().LOG_LEVEL).upper())
    return logger
