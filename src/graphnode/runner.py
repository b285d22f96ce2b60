"""Runs queries and subscriptions against the entity store."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from .core.settings import GraphNodeSettings, get_settings
from .data.query import Query, QueryResult
from .data.store import Store
from .data.subscription import Subscription
from .graphql import (
    QueryExecutionOptions,
    StoreResolver,
    SubscriptionExecutionOptions,
    execute_query,
    execute_subscription,
)
from .observability import active_subscriptions, observe_operation, query_counter

logger = logging.getLogger(__name__)


class GraphQLRunner:
    """Common query runner of the graph node."""

    def __init__(self, store: Store, settings: Optional[GraphNodeSettings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def _resolver(self, query: Query) -> StoreResolver:
        return StoreResolver(
            self.store,
            query.schema,
            default_first=self.settings.default_first,
            max_first=self.settings.max_first,
        )

    async def run_query(self, query: Query) -> QueryResult:
        with observe_operation("query") as state:
            result = execute_query(
                query, QueryExecutionOptions(resolver=self._resolver(query), logger=logger)
            )
            if result.has_errors():
                state["outcome"] = "error"
        return result

    async def run_subscription(self, subscription: Subscription) -> AsyncIterator[QueryResult]:
        """Start a subscription and return its stream of results.

        Raises the first ``SubscriptionError`` if the subscription cannot start.
        """
        query = subscription.query
        result = execute_subscription(
            subscription,
            SubscriptionExecutionOptions(
                resolver=self._resolver(query), store=self.store, logger=logger
            ),
        )
        if result.errors:
            query_counter().labels(kind="subscription", outcome="error").inc()
            raise result.errors[0]
        query_counter().labels(kind="subscription", outcome="success").inc()
        return _track_subscription(result.stream)


async def _track_subscription(stream: AsyncIterator[QueryResult]) -> AsyncIterator[QueryResult]:
    gauge = active_subscriptions()
    gauge.inc()
    try:
        async for result in stream:
            yield result
    finally:
        gauge.dec()
        await stream.aclose()


__all__ = ["GraphQLRunner"]
