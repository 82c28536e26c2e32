"""Logging configuration helpers for Trivia Night."""

from __future__ import annotations

import logging
from logging import Logger
import os

LOG_LEVEL_ENV = "TRIVIA_NIGHT_LOG_LEVEL"


def configure_logging(level: int | str | None = None) -> Logger:
    """Configure basic logging for the application and return its logger.

    Without an explicit level, ``TRIVIA_NIGHT_LOG_LEVEL`` (e.g. ``DEBUG``)
    is used, falling back to INFO.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # One line per poll of /state drowns out the game log.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return logging.getLogger("trivia_night")
