"""Data types for dealing with storing entities."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple


class StoreError(Exception):
    """Raised when the store cannot serve a request."""


@dataclass(frozen=True)
class EntityKey:
    """Key by which an individual entity in the store can be accessed."""

    subgraph_id: str
    entity_type: str
    entity_id: str


class Entity(Dict[str, Any]):
    """An entity is a mapping of attribute names to values; ``id`` is required."""

    @property
    def id(self) -> str:
        try:
            return str(self["id"])
        except KeyError:
            raise StoreError("Entity is missing an `id` attribute") from None


class EntityFilter:
    """Base class of the filter tree evaluated by ``Store.find``."""


@dataclass(frozen=True)
class And(EntityFilter):
    filters: Tuple[EntityFilter, ...]


@dataclass(frozen=True)
class Or(EntityFilter):
    filters: Tuple[EntityFilter, ...]


@dataclass(frozen=True)
class AttributeFilter(EntityFilter):
    attribute: str
    value: Any


class Equal(AttributeFilter):
    pass


class Not(AttributeFilter):
    pass


class GreaterThan(AttributeFilter):
    pass


class LessThan(AttributeFilter):
    pass


class GreaterOrEqual(AttributeFilter):
    pass


class LessOrEqual(AttributeFilter):
    pass


class In(AttributeFilter):
    pass


class NotIn(AttributeFilter):
    pass


class Contains(AttributeFilter):
    pass


class NotContains(AttributeFilter):
    pass


class StartsWith(AttributeFilter):
    pass


class NotStartsWith(AttributeFilter):
    pass


class EndsWith(AttributeFilter):
    pass


class NotEndsWith(AttributeFilter):
    pass


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class EntityOrder:
    attribute: str
    direction: OrderDirection = OrderDirection.ASC


@dataclass(frozen=True)
class EntityRange:
    first: Optional[int] = None
    skip: int = 0


@dataclass(frozen=True)
class EntityQuery:
    """A query for entities of one or more types within a subgraph."""

    subgraph_id: str
    entity_types: Tuple[str, ...]
    filter: Optional[EntityFilter] = None
    order: Optional[EntityOrder] = None
    range: EntityRange = field(default_factory=EntityRange)


class EntityChangeOperation(str, Enum):
    SET = "set"
    REMOVED = "removed"


@dataclass(frozen=True)
class EntityChange:
    subgraph_id: str
    entity_type: str
    entity_id: str
    operation: EntityChangeOperation


class EntityChangeStream(ABC):
    """Async iterator over the changes of a set of entity types."""

    def __aiter__(self) -> AsyncIterator[EntityChange]:
        return self

    @abstractmethod
    async def __anext__(self) -> EntityChange:
        ...

    @abstractmethod
    def drain(self) -> List[EntityChange]:
        """Return the changes that are already queued, without waiting."""

    @abstractmethod
    def close(self) -> None:
        ...


class Store(ABC):
    """Common interface for entity stores."""

    @abstractmethod
    def get(self, key: EntityKey) -> Optional[Entity]:
        ...

    @abstractmethod
    def find(self, query: EntityQuery) -> List[Entity]:
        ...

    def find_one(self, query: EntityQuery) -> Optional[Entity]:
        limited = EntityQuery(
            subgraph_id=query.subgraph_id,
            entity_types=query.entity_types,
            filter=query.filter,
            order=query.order,
            range=EntityRange(first=1, skip=query.range.skip),
        )
        entities = self.find(limited)
        return entities[0] if entities else None

    @abstractmethod
    def set(self, key: EntityKey, entity: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self, key: EntityKey) -> None:
        ...

    @abstractmethod
    def remove_subgraph(self, subgraph_id: str) -> None:
        ...

    @abstractmethod
    def subscribe(self, entity_types: Iterable[Tuple[str, str]]) -> EntityChangeStream:
        """Subscribe to changes of ``(subgraph_id, entity_type)`` pairs."""


__all__ = [
    "And",
    "AttributeFilter",
    "Contains",
    "EndsWith",
    "Entity",
    "EntityChange",
    "EntityChangeOperation",
    "EntityChangeStream",
    "EntityFilter",
    "EntityKey",
    "EntityOrder",
    "EntityQuery",
    "EntityRange",
    "Equal",
    "GreaterOrEqual",
    "GreaterThan",
    "In",
    "LessOrEqual",
    "LessThan",
    "Not",
    "NotContains",
    "NotEndsWith",
    "NotIn",
    "NotStartsWith",
    "Or",
    "OrderDirection",
    "StartsWith",
    "Store",
    "StoreError",
]
