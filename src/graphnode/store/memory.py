"""In-memory entity store with change notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..data.store import (
    And,
    AttributeFilter,
    Contains,
    EndsWith,
    Entity,
    EntityChange,
    EntityChangeOperation,
    EntityChangeStream,
    EntityFilter,
    EntityKey,
    EntityQuery,
    Equal,
    GreaterOrEqual,
    GreaterThan,
    In,
    LessOrEqual,
    LessThan,
    Not,
    NotContains,
    NotEndsWith,
    NotIn,
    NotStartsWith,
    Or,
    OrderDirection,
    StartsWith,
    Store,
    StoreError,
)

logger = logging.getLogger(__name__)

_MISSING = object()


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is _MISSING or actual is None:
            return False
        try:
            return op(actual, expected)
        except TypeError:
            return False

    return check


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str) and isinstance(expected, str):
        return expected in actual
    if isinstance(actual, (list, tuple)):
        if isinstance(expected, (list, tuple)):
            return all(item in actual for item in expected)
        return expected in actual
    return False


def _starts_with(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str) and actual.startswith(expected)


def _ends_with(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str) and actual.endswith(expected)


def _value(actual: Any) -> Any:
    return None if actual is _MISSING else actual


def _in(actual: Any, expected: Any) -> bool:
    # A null list matches nothing
    if expected is None:
        return False
    return _value(actual) in expected


# Filter type -> predicate over (attribute value, filter value)
_PREDICATES: Dict[type, Callable[[Any, Any], bool]] = {
    Equal: lambda actual, expected: _value(actual) == expected,
    Not: lambda actual, expected: _value(actual) != expected,
    GreaterThan: _compare(lambda a, b: a > b),
    LessThan: _compare(lambda a, b: a < b),
    GreaterOrEqual: _compare(lambda a, b: a >= b),
    LessOrEqual: _compare(lambda a, b: a <= b),
    In: _in,
    NotIn: lambda actual, expected: not _in(actual, expected),
    Contains: _contains,
    NotContains: lambda actual, expected: not _contains(actual, expected),
    StartsWith: _starts_with,
    NotStartsWith: lambda actual, expected: not _starts_with(actual, expected),
    EndsWith: _ends_with,
    NotEndsWith: lambda actual, expected: not _ends_with(actual, expected),
}


def matches(entity: Dict[str, Any], entity_filter: Optional[EntityFilter]) -> bool:
    """Evaluate a filter tree against a single entity."""
    if entity_filter is None:
        return True
    if isinstance(entity_filter, And):
        return all(matches(entity, f) for f in entity_filter.filters)
    if isinstance(entity_filter, Or):
        return any(matches(entity, f) for f in entity_filter.filters)
    if isinstance(entity_filter, AttributeFilter):
        predicate = _PREDICATES.get(type(entity_filter))
        if predicate is None:
            raise StoreError(f"Unsupported filter: {type(entity_filter).__name__}")
        return predicate(entity.get(entity_filter.attribute, _MISSING), entity_filter.value)
    raise StoreError(f"Unsupported filter: {entity_filter!r}")


class InMemoryChangeStream(EntityChangeStream):
    def __init__(self, store: "InMemoryStore", pairs: Set[Tuple[str, str]]):
        self._store = store
        self.pairs = pairs
        self._queue: "asyncio.Queue[Optional[EntityChange]]" = asyncio.Queue()
        self._closed = False

    def publish(self, change: EntityChange) -> None:
        if not self._closed:
            self._queue.put_nowait(change)

    async def __anext__(self) -> EntityChange:
        if self._closed:
            raise StopAsyncIteration
        change = await self._queue.get()
        if change is None:
            raise StopAsyncIteration
        return change

    def drain(self) -> List[EntityChange]:
        changes: List[EntityChange] = []
        while True:
            try:
                change = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return changes
            if change is None:
                # Keep the close marker for the next __anext__
                self._queue.put_nowait(None)
                return changes
            changes.append(change)

    def close(self) -> None:
        if self._closed:
            return
        self._store._unsubscribe(self)
        self._queue.put_nowait(None)
        self._closed = True


class InMemoryStore(Store):
    """A ``Store`` that keeps all entities in process memory."""

    def __init__(self) -> None:
        self._entities: Dict[EntityKey, Dict[str, Any]] = {}
        self._streams: List[InMemoryChangeStream] = []

    def get(self, key: EntityKey) -> Optional[Entity]:
        value = self._entities.get(key)
        if value is None:
            return None
        return self._materialize(key.entity_type, value)

    def find(self, query: EntityQuery) -> List[Entity]:
        types = set(query.entity_types)
        candidates = [
            (key.entity_type, value)
            for key, value in self._entities.items()
            if key.subgraph_id == query.subgraph_id and key.entity_type in types
        ]
        selected = [(t, v) for t, v in candidates if matches(v, query.filter)]

        if query.order is not None:
            attribute = query.order.attribute
            reverse = query.order.direction == OrderDirection.DESC
            try:
                selected.sort(key=lambda item: _sort_key(item[1].get(attribute)), reverse=reverse)
            except TypeError as exc:
                raise StoreError(
                    f"Cannot order by `{attribute}`: values are not comparable"
                ) from exc
        else:
            selected.sort(key=lambda item: str(item[1].get("id")))

        start = query.range.skip
        end = start + query.range.first if query.range.first is not None else None
        return [self._materialize(t, v) for t, v in selected[start:end]]

    def set(self, key: EntityKey, entity: Dict[str, Any]) -> None:
        data = {k: v for k, v in entity.items() if k != "__typename"}
        entity_id = data.setdefault("id", key.entity_id)
        if str(entity_id) != key.entity_id:
            raise StoreError(
                f"Entity id {entity_id!r} does not match key id {key.entity_id!r}"
            )
        existing = self._entities.get(key)
        merged = {**existing, **data} if existing is not None else data
        self._entities[key] = merged
        self._publish(key, EntityChangeOperation.SET)

    def delete(self, key: EntityKey) -> None:
        if self._entities.pop(key, None) is not None:
            self._publish(key, EntityChangeOperation.REMOVED)

    def remove_subgraph(self, subgraph_id: str) -> None:
        keys = [key for key in self._entities if key.subgraph_id == subgraph_id]
        for key in keys:
            self.delete(key)
        logger.info("Removed %d entities of subgraph %s", len(keys), subgraph_id)

    def subscribe(self, entity_types: Iterable[Tuple[str, str]]) -> InMemoryChangeStream:
        stream = InMemoryChangeStream(self, set(entity_types))
        self._streams.append(stream)
        return stream

    def _unsubscribe(self, stream: InMemoryChangeStream) -> None:
        if stream in self._streams:
            self._streams.remove(stream)

    def _publish(self, key: EntityKey, operation: EntityChangeOperation) -> None:
        change = EntityChange(
            subgraph_id=key.subgraph_id,
            entity_type=key.entity_type,
            entity_id=key.entity_id,
            operation=operation,
        )
        for stream in list(self._streams):
            if (key.subgraph_id, key.entity_type) in stream.pairs:
                stream.publish(change)

    @staticmethod
    def _materialize(entity_type: str, value: Dict[str, Any]) -> Entity:
        entity = Entity(value)
        entity["__typename"] = entity_type
        return entity


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Missing values sort first
    return (0, "") if value is None else (1, value)


__all__ = ["InMemoryChangeStream", "InMemoryStore", "matches"]
