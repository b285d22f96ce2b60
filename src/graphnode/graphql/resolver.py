"""The interface the executor uses to fetch field values."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from graphql.language import (
    DocumentNode,
    EnumTypeDefinitionNode,
    FieldDefinitionNode,
    ObjectTypeDefinitionNode,
    ScalarTypeDefinitionNode,
    TypeDefinitionNode,
)

from . import ast as qast


class ResolverError(Exception):
    """A resolver could not produce the value of a field."""


class Resolver(ABC):
    """Resolves entities, enum values and scalar values of fields.

    ``parent`` is the already resolved value of the enclosing object, or
    ``None`` for root fields. ``object_type`` is the named type of the field,
    which may be an interface or a union.
    """

    @abstractmethod
    def resolve_objects(
        self,
        parent: Optional[Mapping[str, Any]],
        field: str,
        field_definition: FieldDefinitionNode,
        object_type: TypeDefinitionNode,
        arguments: Dict[str, Any],
    ) -> Any:
        ...

    @abstractmethod
    def resolve_object(
        self,
        parent: Optional[Mapping[str, Any]],
        field: str,
        field_definition: FieldDefinitionNode,
        object_type: TypeDefinitionNode,
        arguments: Dict[str, Any],
    ) -> Any:
        ...

    def resolve_enum_value(
        self, field_definition: FieldDefinitionNode, enum_type: EnumTypeDefinitionNode, value: Any
    ) -> Any:
        return value

    def resolve_enum_values(
        self, field_definition: FieldDefinitionNode, enum_type: EnumTypeDefinitionNode, value: Any
    ) -> Any:
        return value

    def resolve_scalar_value(
        self,
        field_definition: FieldDefinitionNode,
        scalar_type: ScalarTypeDefinitionNode,
        value: Any,
    ) -> Any:
        return value

    def resolve_scalar_values(
        self,
        field_definition: FieldDefinitionNode,
        scalar_type: ScalarTypeDefinitionNode,
        value: Any,
    ) -> Any:
        return value

    def resolve_abstract_type(
        self, schema: DocumentNode, abstract_type: TypeDefinitionNode, value: Any
    ) -> Optional[ObjectTypeDefinitionNode]:
        """Pick the concrete object type of a value of an interface or union type."""
        if not isinstance(value, Mapping):
            return None
        type_name = value.get("__typename")
        if not isinstance(type_name, str):
            return None
        for object_type in qast.get_possible_types(schema, abstract_type):
            if object_type.name.value == type_name:
                return object_type
        return None


__all__ = ["Resolver", "ResolverError"]
