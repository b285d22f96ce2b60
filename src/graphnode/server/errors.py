"""Errors that can occur while processing incoming GraphQL requests."""

from __future__ import annotations

from typing import Any, Dict

from ..data.query import QueryError


class GraphQLServerError(Exception):
    """Base class of request processing errors; serializes as a GraphQL error."""

    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self)}


class ClientError(GraphQLServerError):
    """The request itself is malformed."""

    status_code = 400


class QueryErrorResponse(GraphQLServerError):
    """The query in the request could not be decoded or parsed."""

    status_code = 400

    def __init__(self, error: QueryError):
        super().__init__(str(error))
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return self.error.to_dict()


class UnknownSubgraphError(GraphQLServerError):
    status_code = 404

    def __init__(self, name_or_id: str):
        super().__init__(f"Unknown subgraph name or ID: {name_or_id}")
        self.name_or_id = name_or_id


class InternalError(GraphQLServerError):
    status_code = 500


__all__ = [
    "ClientError",
    "GraphQLServerError",
    "InternalError",
    "QueryErrorResponse",
    "UnknownSubgraphError",
]
