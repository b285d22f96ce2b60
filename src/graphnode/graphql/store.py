"""Resolution of GraphQL fields from an entity store."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from graphql.language import FieldDefinitionNode, ObjectTypeDefinitionNode, TypeDefinitionNode

from ..data.schema import Schema
from ..data.store import (
    And,
    AttributeFilter,
    Contains,
    EndsWith,
    Entity,
    EntityFilter,
    EntityKey,
    EntityOrder,
    EntityQuery,
    EntityRange,
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
    OrderDirection,
    StartsWith,
    Store,
    StoreError,
)
from . import ast as sast
from .api_schema import DEFAULT_FIRST
from .resolver import Resolver, ResolverError

DEFAULT_MAX_FIRST = 1000

# Longest suffixes first so `_not_in` is not read as `_in`
_FILTER_SUFFIXES: Tuple[Tuple[str, Type[AttributeFilter]], ...] = (
    ("_not_starts_with", NotStartsWith),
    ("_not_ends_with", NotEndsWith),
    ("_not_contains", NotContains),
    ("_starts_with", StartsWith),
    ("_ends_with", EndsWith),
    ("_contains", Contains),
    ("_not_in", NotIn),
    ("_in", In),
    ("_not", Not),
    ("_gte", GreaterOrEqual),
    ("_lte", LessOrEqual),
    ("_gt", GreaterThan),
    ("_lt", LessThan),
)


def parse_filter_field(key: str) -> Tuple[str, Type[AttributeFilter]]:
    """Split a ``where`` key such as ``name_starts_with`` into attribute and filter kind."""
    for suffix, filter_class in _FILTER_SUFFIXES:
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)], filter_class
    return key, Equal


def build_filter(where: Optional[Mapping[str, Any]]) -> Optional[EntityFilter]:
    if not where:
        return None
    filters: List[EntityFilter] = []
    for key, value in where.items():
        attribute, filter_class = parse_filter_field(key)
        filters.append(filter_class(attribute, value))
    return filters[0] if len(filters) == 1 else And(tuple(filters))


def build_query(
    object_types: Sequence[TypeDefinitionNode],
    arguments: Mapping[str, Any],
    subgraph_id: str,
    default_first: int = DEFAULT_FIRST,
    max_first: int = DEFAULT_MAX_FIRST,
) -> EntityQuery:
    """Build an ``EntityQuery`` from the collection arguments of a field."""
    first = arguments.get("first")
    if first is None:
        first = default_first
    if first < 0 or first > max_first:
        raise ResolverError(f'Value of "first" must be between 0 and {max_first}')

    skip = arguments.get("skip") or 0
    if skip < 0:
        raise ResolverError('Value of "skip" must not be negative')

    order = None
    order_by = arguments.get("orderBy")
    if order_by is not None:
        direction = OrderDirection(arguments.get("orderDirection") or OrderDirection.ASC.value)
        order = EntityOrder(attribute=order_by, direction=direction)

    return EntityQuery(
        subgraph_id=subgraph_id,
        entity_types=tuple(sast.get_type_name(t) for t in object_types),
        filter=build_filter(arguments.get("where")),
        order=order,
        range=EntityRange(first=first, skip=skip),
    )


def _and(query: EntityQuery, extra: EntityFilter) -> EntityQuery:
    combined = extra if query.filter is None else And((query.filter, extra))
    return EntityQuery(
        subgraph_id=query.subgraph_id,
        entity_types=query.entity_types,
        filter=combined,
        order=query.order,
        range=query.range,
    )


class StoreResolver(Resolver):
    """Resolves entities of a single subgraph from a ``Store``.

    Root fields look entities up by id or query collections of them. Fields
    of entities follow references (an id or a list of ids stored in the
    parent) and ``@derivedFrom`` relations (entities whose field points back
    at the parent).
    """

    def __init__(
        self,
        store: Store,
        schema: Schema,
        default_first: int = DEFAULT_FIRST,
        max_first: int = DEFAULT_MAX_FIRST,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.schema = schema
        self.subgraph_id = schema.id
        self.default_first = default_first
        self.max_first = max_first
        self.logger = logger or logging.getLogger(__name__)

    def resolve_objects(
        self,
        parent: Optional[Mapping[str, Any]],
        field: str,
        field_definition: FieldDefinitionNode,
        object_type: TypeDefinitionNode,
        arguments: Dict[str, Any],
    ) -> Any:
        object_types = self._possible_types(object_type)
        query = build_query(
            object_types, arguments, self.subgraph_id, self.default_first, self.max_first
        )

        if parent is not None:
            derived_from = sast.get_derived_from(field_definition)
            if derived_from is not None:
                query = _and(query, self._derived_filter(object_types, derived_from, parent))
            else:
                ids = parent.get(field)
                if ids is None:
                    return None
                if not isinstance(ids, (list, tuple)):
                    ids = [ids]
                query = _and(query, In("id", [str(i) for i in ids]))

        return self._find(query)

    def resolve_object(
        self,
        parent: Optional[Mapping[str, Any]],
        field: str,
        field_definition: FieldDefinitionNode,
        object_type: TypeDefinitionNode,
        arguments: Dict[str, Any],
    ) -> Any:
        object_types = self._possible_types(object_type)

        if parent is None:
            return self._get(object_types, arguments.get("id"))

        derived_from = sast.get_derived_from(field_definition)
        if derived_from is not None:
            query = build_query(object_types, {"first": 1}, self.subgraph_id, max_first=1)
            query = _and(query, self._derived_filter(object_types, derived_from, parent))
            entities = self._find(query)
            return entities[0] if entities else None

        value = parent.get(field)
        if value is None or isinstance(value, Mapping):
            return value
        return self._get(object_types, value)

    def _possible_types(self, object_type: TypeDefinitionNode) -> List[ObjectTypeDefinitionNode]:
        return sast.get_possible_types(self.schema.document, object_type)

    def _derived_filter(
        self,
        object_types: Sequence[ObjectTypeDefinitionNode],
        attribute: str,
        parent: Mapping[str, Any],
    ) -> EntityFilter:
        parent_id = str(parent.get("id"))
        for object_type in object_types:
            field = sast.get_field_type(object_type, attribute)
            if field is not None and sast.is_list_type(field.type):
                return Contains(attribute, parent_id)
        return Equal(attribute, parent_id)

    def _get(
        self, object_types: Sequence[ObjectTypeDefinitionNode], entity_id: Any
    ) -> Optional[Entity]:
        if entity_id is None:
            return None
        for object_type in object_types:
            key = EntityKey(self.subgraph_id, object_type.name.value, str(entity_id))
            try:
                entity = self.store.get(key)
            except StoreError as exc:
                raise ResolverError(str(exc)) from exc
            if entity is not None:
                return entity
        return None

    def _find(self, query: EntityQuery) -> List[Entity]:
        self.logger.debug("Find %s in subgraph %s", query.entity_types, query.subgraph_id)
        try:
            return self.store.find(query)
        except StoreError as exc:
            raise ResolverError(str(exc)) from exc


__all__ = ["DEFAULT_MAX_FIRST", "StoreResolver", "build_filter", "build_query", "parse_filter_field"]
