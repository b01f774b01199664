"""Logging utilities for playable builds."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "playable"

_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the playable hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure root logger for playable with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[playable] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def pretty_bytes(size: int) -> str:
    """Render a byte count with decimal units, e.g. ``1.23 kB``."""
    if size < 1000:
        return f"{size} B"
    value = float(size)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS[1:]:
        value /= 1000.0
        if value < 999.5:
            break
    return f"{value:.3g} {unit}"


def format_size(size: int) -> str:
    return f"{size} B ({pretty_bytes(size)})"


def log_filesize(logger: logging.Logger, filename: str, kind: str, size: int) -> None:
    """Log an operator-facing size line such as ``* logo.png encoded size ...``."""
    logger.info("* %s%s size %s", filename, kind, format_size(size))


__all__ = ["configure_logging", "format_size", "get_logger", "log_filesize", "pretty_bytes"]
