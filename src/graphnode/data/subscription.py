"""Data types for dealing with GraphQL subscriptions."""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional

from .graphql import GraphQLError
from .query import Query, QueryResult


class Subscription:
    """A subscription is a query whose result is re-sent as the data changes."""

    def __init__(self, query: Query):
        self.query = query


class SubscriptionError(Exception):
    """Error caused while processing a subscription request."""

    def __init__(self, error: GraphQLError):
        super().__init__(str(error))
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self)}


class SubscriptionResult:
    """Either a stream of query results or the errors that prevented one."""

    def __init__(self, stream: Optional[AsyncIterator[QueryResult]] = None):
        self.stream = stream
        self.errors: Optional[List[SubscriptionError]] = None

    @classmethod
    def from_error(cls, error: GraphQLError) -> "SubscriptionResult":
        result = cls(None)
        result.add_error(error if isinstance(error, SubscriptionError) else SubscriptionError(error))
        return result

    def add_error(self, error: SubscriptionError) -> None:
        if self.errors is None:
            self.errors = []
        self.errors.append(error)


__all__ = ["Subscription", "SubscriptionError", "SubscriptionResult"]
