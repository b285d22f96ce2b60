"""Prometheus metrics for the graph node."""

from __future__ import annotations

from .metric_helpers import clear_metric_cache, get_counter, get_gauge, get_histogram
from .metrics import (
    METRICS_PATH,
    active_subscriptions,
    deployed_subgraphs,
    observe_operation,
    query_counter,
    query_duration,
    render_latest,
    websocket_connections,
)

__all__ = [
    "METRICS_PATH",
    "active_subscriptions",
    "clear_metric_cache",
    "deployed_subgraphs",
    "get_counter",
    "get_gauge",
    "get_histogram",
    "observe_operation",
    "query_counter",
    "query_duration",
    "render_latest",
    "websocket_connections",
]
