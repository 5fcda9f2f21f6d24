"""Logging helpers for Beacon."""
from __future__ import annotations

from logging.config import dictConfig
from typing import Iterable


DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
}


def setup_logging(level: str = "INFO", loggers: Iterable[str] = ("beacon",)) -> None:
    """Send records to the console and set ``level`` on each named agent logger.

    The agent passes its own hierarchy plus the injected delivery-error logger,
    which may live outside ``beacon.*``.
    """

    levels = {name: {"level": level.upper()} for name in dict.fromkeys(loggers)}
    dictConfig({**DEFAULT_LOGGING_CONFIG, "loggers": levels})
