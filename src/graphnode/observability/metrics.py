"""Prometheus metrics exported by the graph node."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from .metric_helpers import get_counter, get_gauge, get_histogram

METRICS_PATH = "/metrics"

_QUERY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


def query_counter():
    return get_counter(
        "graphnode_graphql_queries_total",
        "GraphQL operations executed, by kind and outcome",
        ["kind", "outcome"],
    )


def query_duration():
    return get_histogram(
        "graphnode_graphql_query_duration_seconds",
        "Time spent executing GraphQL operations",
        ["kind"],
        buckets=_QUERY_BUCKETS,
    )


def websocket_connections():
    return get_gauge(
        "graphnode_websocket_connections",
        "Open GraphQL over WebSocket connections",
    )


def active_subscriptions():
    return get_gauge(
        "graphnode_subscriptions_active",
        "Running GraphQL subscription operations",
    )


def deployed_subgraphs():
    return get_gauge(
        "graphnode_subgraphs_deployed",
        "Subgraphs currently deployed on this node",
    )


@contextmanager
def observe_operation(kind: str) -> Iterator[dict]:
    """Time an operation and count it; callers set ``outcome`` on the yielded dict."""
    state = {"outcome": "success"}
    start = time.perf_counter()
    try:
        yield state
    except Exception:
        state["outcome"] = "failure"
        raise
    finally:
        query_duration().labels(kind=kind).observe(time.perf_counter() - start)
        query_counter().labels(kind=kind, outcome=state["outcome"]).inc()


def render_latest() -> tuple[bytes, str]:
    """Return the Prometheus exposition payload and its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = [
    "METRICS_PATH",
    "active_subscriptions",
    "deployed_subgraphs",
    "observe_operation",
    "query_counter",
    "query_duration",
    "render_latest",
    "websocket_connections",
]
