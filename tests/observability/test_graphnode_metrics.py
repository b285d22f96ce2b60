from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from graphnode.observability import (
    METRICS_PATH,
    clear_metric_cache,
    get_counter,
    get_gauge,
    observe_operation,
    query_counter,
    render_latest,
)


def test_collectors_are_created_once():
    registry = CollectorRegistry()
    first = get_counter("things_total", "Things", ["kind"], registry=registry)
    second = get_counter("things_total", "Things", ["kind"], registry=registry)
    assert first is second


def test_existing_collectors_are_reused_after_cache_clear():
    registry = CollectorRegistry()
    gauge = get_gauge("open_things", "Open things", registry=registry)
    clear_metric_cache()
    assert get_gauge("open_things", "Open things", registry=registry) is gauge


def _count(kind, outcome):
    return query_counter().labels(kind=kind, outcome=outcome)._value.get()


def test_observe_operation_counts_outcomes():
    before_success = _count("test", "success")
    before_error = _count("test", "error")
    before_failure = _count("test", "failure")

    with observe_operation("test"):
        pass
    with observe_operation("test") as state:
        state["outcome"] = "error"
    with pytest.raises(RuntimeError):
        with observe_operation("test"):
            raise RuntimeError("boom")

    assert _count("test", "success") == before_success + 1
    assert _count("test", "error") == before_error + 1
    assert _count("test", "failure") == before_failure + 1


def test_render_latest():
    query_counter()
    payload, content_type = render_latest()
    assert METRICS_PATH == "/metrics"
    assert content_type.startswith("text/plain")
    assert b"graphnode_graphql_queries_total" in payload
