"""Logging utilities for schemaref commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "schemaref"

# TypeDoc-style level names accepted by the `log_level` configuration key.
LOG_LEVELS = {
    "verbose": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "none": logging.CRITICAL + 10,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the schemaref hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(level_name: str | None) -> int:
    """Map a configured level name onto a :mod:`logging` level."""
    if not level_name:
        return logging.ERROR
    try:
        return LOG_LEVELS[level_name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level_name}") from None


def configure_logging(
    *,
    verbose: bool = False,
    level_name: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the schemaref logger with a stderr sink and optional file sink.

    stdout carries the rendered document, so console logging always goes to stderr.
    """
    level = logging.DEBUG if verbose else resolve_level(level_name)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[schemaref] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["LOG_LEVELS", "configure_logging", "get_logger", "resolve_level"]
