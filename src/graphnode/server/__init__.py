"""HTTP and WebSocket servers of the graph node."""

from __future__ import annotations

from .app import create_app
from .errors import (
    ClientError,
    GraphQLServerError,
    InternalError,
    QueryErrorResponse,
    UnknownSubgraphError,
)

__all__ = [
    "ClientError",
    "GraphQLServerError",
    "InternalError",
    "QueryErrorResponse",
    "UnknownSubgraphError",
    "create_app",
]
