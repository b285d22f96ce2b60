"""Light-weight helpers for Prometheus metric collectors.

These helpers centralize collector lookup and creation so that the servers,
the runner and the subgraph provider can import the same metrics without
tripping Prometheus' duplicate registration safeguards (the app factory may
run several times in one process, e.g. under tests).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

_MetricKey = Tuple[str, str, Tuple[str, ...], int]

_METRIC_CACHE: Dict[_MetricKey, Any] = {}


def _metric_key(
    metric_type: str,
    name: str,
    labelnames: Optional[Iterable[str]],
    registry: CollectorRegistry,
) -> _MetricKey:
    return (metric_type, name, tuple(labelnames or ()), id(registry))


def _get_existing_collector(name: str, registry: CollectorRegistry) -> Any:
    names_to_collectors = getattr(registry, "_names_to_collectors", None)
    if not names_to_collectors:
        return None
    return names_to_collectors.get(name)


def _get_collector(
    metric_type: str,
    name: str,
    documentation: str,
    labelnames: Optional[Iterable[str]],
    constructor,
    registry: Optional[CollectorRegistry] = None,
    **kwargs: Any,
) -> Any:
    target_registry = registry or REGISTRY
    key = _metric_key(metric_type, name, labelnames, target_registry)
    cached = _METRIC_CACHE.get(key)
    if cached is not None:
        return cached

    collector = _get_existing_collector(name, target_registry)
    if collector is None:
        collector = constructor(
            name,
            documentation,
            list(labelnames or []),
            registry=target_registry,
            **kwargs,
        )

    _METRIC_CACHE[key] = collector
    return collector


def get_counter(
    name: str,
    documentation: str,
    labelnames: Optional[Iterable[str]] = None,
    *,
    registry: Optional[CollectorRegistry] = None,
) -> Counter:
    """Return a cached Counter collector (no duplicate registration)."""

    return _get_collector("counter", name, documentation, labelnames, Counter, registry)


def get_histogram(
    name: str,
    documentation: str,
    labelnames: Optional[Iterable[str]] = None,
    *,
    registry: Optional[CollectorRegistry] = None,
    **kwargs: Any,
) -> Histogram:
    """Return a cached Histogram collector."""

    return _get_collector("histogram", name, documentation, labelnames, Histogram, registry, **kwargs)


def get_gauge(
    name: str,
    documentation: str,
    labelnames: Optional[Iterable[str]] = None,
    *,
    registry: Optional[CollectorRegistry] = None,
) -> Gauge:
    """Return a cached Gauge collector."""

    return _get_collector("gauge", name, documentation, labelnames, Gauge, registry)


def clear_metric_cache() -> None:
    """Clear the helper cache (useful for isolated tests)."""

    _METRIC_CACHE.clear()


__all__ = ["clear_metric_cache", "get_counter", "get_gauge", "get_histogram"]
