"""Tests for running queries and subscriptions through the runner."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from graphnode.core.settings import GraphNodeSettings
from graphnode.data.subscription import Subscription, SubscriptionError
from graphnode.runner import GraphQLRunner


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_run_query_uses_configured_limits(store, make_query):
    runner = GraphQLRunner(store, GraphNodeSettings(default_first=2, max_first=2))

    result = await runner.run_query(make_query("{ users { id } }"))
    assert result.data == {"users": [{"id": "u1"}, {"id": "u2"}]}

    before = _sample("graphnode_graphql_queries_total", kind="query", outcome="error")
    result = await runner.run_query(make_query("{ users(first: 3) { id } }"))
    assert result.has_errors()
    assert _sample("graphnode_graphql_queries_total", kind="query", outcome="error") == before + 1


@pytest.mark.asyncio
async def test_run_subscription_tracks_active_subscriptions(store, make_query, settings):
    runner = GraphQLRunner(store, settings)
    before = _sample("graphnode_subscriptions_active")

    stream = await runner.run_subscription(
        Subscription(make_query('subscription { user(id: "u1") { name } }'))
    )
    result = await stream.__anext__()
    assert result.data == {"user": {"name": "Alice"}}
    assert _sample("graphnode_subscriptions_active") == before + 1

    await stream.aclose()
    assert _sample("graphnode_subscriptions_active") == before
    assert store._streams == []


@pytest.mark.asyncio
async def test_run_subscription_raises_start_errors(store, make_query, settings):
    runner = GraphQLRunner(store, settings)

    with pytest.raises(SubscriptionError, match="Only subscriptions are supported"):
        await runner.run_subscription(Subscription(make_query("{ users { id } }")))
