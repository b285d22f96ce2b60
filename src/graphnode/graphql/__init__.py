"""GraphQL query and subscription execution for subgraph schemas."""

from __future__ import annotations

from .api_schema import APISchemaError, api_schema
from .errors import ExecutionError
from .execution import Execution
from .introspection import IntrospectionResolver
from .query import QueryExecutionOptions, execute_query
from .resolver import Resolver, ResolverError
from .store import StoreResolver, build_query
from .subscription import SubscriptionExecutionOptions, execute_subscription

__all__ = [
    "APISchemaError",
    "Execution",
    "ExecutionError",
    "IntrospectionResolver",
    "QueryExecutionOptions",
    "Resolver",
    "ResolverError",
    "StoreResolver",
    "SubscriptionExecutionOptions",
    "api_schema",
    "build_query",
    "execute_query",
    "execute_subscription",
]
