"""Structured logging setup. Read-only config; no business logic."""

import logging
import sys
from typing import Any, TextIO

from chunky.config.settings import get_settings

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level_name: str | None = None, stream: TextIO | None = None) -> None:
    """
    Route log records to `stream` (stderr by default) so stdout carries only the CLI report.
    `level_name` overrides CHUNKY_LOG_LEVEL; unknown names fall back to WARNING.
    """
    name = (level_name or get_settings().log_level).upper()
    level = getattr(logging, name, logging.WARNING) if name in LOG_LEVELS else logging.WARNING

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Reduce noise from asyncio
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_extra(extra: dict[str, Any]) -> dict[str, Any]:
    """Keyword arguments attaching structured fields: logger.info(msg, **log_extra({...}))."""
    return {"extra": extra}
