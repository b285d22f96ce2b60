"""Logging configuration and structured logging helpers."""
from __future__ import annotations

import logging
from typing import Optional

from .context import (
    connection_context,
    get_context,
    get_request_id,
    log_structured,
    request_context,
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", *, fmt: Optional[str] = None) -> None:
    """Configure root logging once for the node process."""
    logging.basicConfig(level=level.upper(), format=fmt or _LOG_FORMAT)
    logging.getLogger("graphnode").setLevel(level.upper())


__all__ = [
    "configure_logging",
    "connection_context",
    "get_context",
    "get_request_id",
    "log_structured",
    "request_context",
]
