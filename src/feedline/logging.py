"""Logging setup helpers for feedline."""

from __future__ import annotations

import logging

LOGGER_NAME = "feedline"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure root handlers and the feedline level for host applications."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(LOGGER_NAME).setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger or a child of it.

    Module names already under the package (``feedline.pipeline.dedup``) are
    used as-is; short names (``"live"``) are nested under ``feedline``.
    """
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
