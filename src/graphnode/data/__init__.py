"""Data types shared across the graph node."""

from __future__ import annotations

from .graphql import GraphQLError, GraphQLParseError, Position
from .query import Query, QueryError, QueryResult, QueryVariables
from .schema import Schema
from .subscription import Subscription, SubscriptionError, SubscriptionResult

__all__ = [
    "GraphQLError",
    "GraphQLParseError",
    "Position",
    "Query",
    "QueryError",
    "QueryResult",
    "QueryVariables",
    "Schema",
    "Subscription",
    "SubscriptionError",
    "SubscriptionResult",
]
