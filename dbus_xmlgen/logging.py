"""Logging utilities for dbus-xmlgen"""

from __future__ import annotations

import logging

_LOGGER_NAME = "dbus_xmlgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the dbus_xmlgen hierarchy."""
    if name and not name.startswith(_LOGGER_NAME):
        name = f"{_LOGGER_NAME}.{name}"
    return logging.getLogger(name or _LOGGER_NAME)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send dbus_xmlgen log records to stderr."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Drop handlers from a previous call so output is not duplicated
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[dbus-xmlgen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
