"""Shared context helpers for request-scoped identifiers and structured logging."""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, Optional

_SENSITIVE_KEYS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "access_token",
    "refresh_token",
    "token",
    "password",
    "secret",
    "client_secret",
}
_REDACTED = "[REDACTED]"

_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("graphnode_request_id", default=None)
_CONNECTION_ID: ContextVar[Optional[str]] = ContextVar("graphnode_connection_id", default=None)
_SUBGRAPH: ContextVar[Optional[str]] = ContextVar("graphnode_subgraph", default=None)

# Logger for structured logging
STRUCTURED_LOGGER = logging.getLogger("graphnode.structured")


def set_request_id(request_id: str) -> Token:
    """Bind a request identifier to the current context and return the token."""
    return _REQUEST_ID.set(request_id)


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    """Return the current request identifier if one has been set."""
    value = _REQUEST_ID.get()
    return value if value is not None else default


def reset_request_id(token: Token) -> None:
    _REQUEST_ID.reset(token)


def set_connection_id(connection_id: str) -> Token:
    return _CONNECTION_ID.set(connection_id)


def get_connection_id(default: Optional[str] = None) -> Optional[str]:
    value = _CONNECTION_ID.get()
    return value if value is not None else default


def reset_connection_id(token: Token) -> None:
    _CONNECTION_ID.reset(token)


def set_subgraph(subgraph: str) -> Token:
    return _SUBGRAPH.set(subgraph)


def get_subgraph(default: Optional[str] = None) -> Optional[str]:
    value = _SUBGRAPH.get()
    return value if value is not None else default


def reset_subgraph(token: Token) -> None:
    _SUBGRAPH.reset(token)


def get_context() -> Dict[str, Optional[str]]:
    """Get all context variables as a dictionary."""
    return {
        "request_id": get_request_id(),
        "connection_id": get_connection_id(),
        "subgraph": get_subgraph(),
    }


@contextmanager
def request_context(
    request_id: str,
    subgraph: Optional[str] = None,
) -> Iterator[Dict[str, Optional[str]]]:
    """Temporarily bind the request identifier and, optionally, the subgraph."""
    request_token = set_request_id(request_id)
    subgraph_token = set_subgraph(subgraph) if subgraph is not None else None
    try:
        yield get_context()
    finally:
        if subgraph_token is not None:
            reset_subgraph(subgraph_token)
        reset_request_id(request_token)


@contextmanager
def connection_context(
    connection_id: str,
    subgraph: Optional[str] = None,
) -> Iterator[Dict[str, Optional[str]]]:
    """Temporarily bind a WebSocket connection identifier and its subgraph."""
    connection_token = set_connection_id(connection_id)
    subgraph_token = set_subgraph(subgraph) if subgraph is not None else None
    try:
        yield get_context()
    finally:
        if subgraph_token is not None:
            reset_subgraph(subgraph_token)
        reset_connection_id(connection_token)


def redact_sensitive_data(value: Any) -> Any:
    """Recursively redact sensitive keys inside mappings and sequences."""

    if isinstance(value, Mapping):
        redacted: Dict[Any, Any] = {}
        for key, item in value.items():
            if isinstance(key, str) and key.lower() in _SENSITIVE_KEYS:
                redacted[key] = _REDACTED
            else:
                redacted[key] = redact_sensitive_data(item)
        return redacted
    if isinstance(value, list):
        return [redact_sensitive_data(item) for item in value]
    if isinstance(value, tuple):
        return tuple(redact_sensitive_data(item) for item in value)
    return value


_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def log_structured(
    level: str,
    event: str,
    **kwargs: Any
) -> None:
    """Log a structured message with context information."""
    log_level = _LEVELS.get(level, logging.INFO)
    if not STRUCTURED_LOGGER.isEnabledFor(log_level):
        return

    sanitized_kwargs = redact_sensitive_data(dict(kwargs)) if kwargs else {}
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        **get_context(),
        **sanitized_kwargs,
    }

    # Filter out None values
    log_data = {k: v for k, v in log_data.items() if v is not None}

    STRUCTURED_LOGGER.log(log_level, json.dumps(log_data, default=str, separators=(",", ":")))


__all__ = [
    "STRUCTURED_LOGGER",
    "connection_context",
    "get_connection_id",
    "get_context",
    "get_request_id",
    "get_subgraph",
    "log_structured",
    "redact_sensitive_data",
    "request_context",
]
