"""Lookup of deployed subgraph schemas by name or id."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..data.schema import Schema
from .events import SchemaAdded, SchemaEvent, SchemaRemoved

logger = logging.getLogger(__name__)


class SubgraphRegistry:
    """Tracks the API schemas the servers can run queries against.

    Kept up to date by feeding it the provider's ``SchemaEvent``s through
    ``handle_schema_event``.
    """

    def __init__(self) -> None:
        self._ids_by_name: Dict[str, str] = {}
        self._schemas_by_name: Dict[str, Schema] = {}
        self._schemas: Dict[str, Schema] = {}
        # Names in the order they were added, most recent last
        self._names: List[str] = []

    async def handle_schema_event(self, event: SchemaEvent) -> None:
        if isinstance(event, SchemaAdded):
            self.add(event.schema)
        elif isinstance(event, SchemaRemoved):
            self.remove(event.name, event.id)

    def add(self, schema: Schema) -> None:
        logger.info("Schema added for subgraph %s (%s)", schema.name, schema.id)
        self._ids_by_name[schema.name] = schema.id
        self._schemas_by_name[schema.name] = schema
        self._schemas[schema.id] = schema
        if schema.name in self._names:
            self._names.remove(schema.name)
        self._names.append(schema.name)

    def remove(self, name: str, id: str) -> None:
        logger.info("Schema removed for subgraph %s (%s)", name, id)
        if self._ids_by_name.get(name) == id:
            del self._ids_by_name[name]
            del self._schemas_by_name[name]
            self._names.remove(name)

        # Lookups by id fall back to a schema of a name still deployed to it
        remaining = [
            self._schemas_by_name[other]
            for other, other_id in self._ids_by_name.items()
            if other_id == id
        ]
        if remaining:
            self._schemas[id] = remaining[-1]
        else:
            self._schemas.pop(id, None)

    def resolve(self, name_or_id: str) -> Optional[Schema]:
        """Find a schema by subgraph name, falling back to the subgraph id."""
        schema = self.by_name(name_or_id)
        return schema if schema is not None else self.by_id(name_or_id)

    def by_name(self, name: str) -> Optional[Schema]:
        return self._schemas_by_name.get(name)

    def by_id(self, subgraph_id: str) -> Optional[Schema]:
        return self._schemas.get(subgraph_id)

    def default(self) -> Optional[Schema]:
        """The schema of the most recently added subgraph."""
        if not self._names:
            return None
        return self.by_name(self._names[-1])

    def names(self) -> List[str]:
        return list(self._names)


__all__ = ["SubgraphRegistry"]
