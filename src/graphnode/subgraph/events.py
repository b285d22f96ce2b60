"""Events exchanged between the subgraph provider and its consumers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, TypeVar, Union

from ..data.schema import Schema
from ..data.subgraph import SubgraphManifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubgraphAdded:
    """A subgraph was added to the provider."""

    manifest: SubgraphManifest


@dataclass(frozen=True)
class SubgraphRemoved:
    """The subgraph with the given id was removed from the provider."""

    id: str


@dataclass(frozen=True)
class SchemaAdded:
    """A subgraph with a new (API) schema was added."""

    schema: Schema


@dataclass(frozen=True)
class SchemaRemoved:
    """The subgraph with the given name and id was removed."""

    name: str
    id: str


SubgraphProviderEvent = Union[SubgraphAdded, SubgraphRemoved]
SchemaEvent = Union[SchemaAdded, SchemaRemoved]

E = TypeVar("E")
EventSink = Callable[[E], Awaitable[None]]


class EventProducer(Generic[E]):
    """Delivers events, in order, to every registered sink."""

    def __init__(self, name: str):
        self.name = name
        self._sinks: List[EventSink] = []

    def add_sink(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: EventSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    async def emit(self, event: E) -> None:
        logger.debug("Emitting %s event %s", self.name, type(event).__name__)
        for sink in list(self._sinks):
            await sink(event)


__all__ = [
    "EventProducer",
    "EventSink",
    "SchemaAdded",
    "SchemaEvent",
    "SchemaRemoved",
    "SubgraphAdded",
    "SubgraphProviderEvent",
    "SubgraphRemoved",
]
