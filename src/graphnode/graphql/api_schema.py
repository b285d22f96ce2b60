"""Derivation of the queryable API schema from a subgraph's entity schema."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Set

from graphql import parse
from graphql.language import (
    DefinitionNode,
    DocumentNode,
    FieldDefinitionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    ObjectTypeDefinitionNode,
    ScalarTypeDefinitionNode,
    TypeDefinitionNode,
)

from . import ast as sast

RESERVED_TYPES = ("Query", "Subscription", "OrderDirection")

# Scalars entity schemas may use without declaring them
GRAPH_SCALARS = ("BigInt", "BigDecimal", "Bytes")

DEFAULT_FIRST = 100

_NUMERIC_SCALARS = {"ID", "Int", "Float", "BigInt", "BigDecimal"}
_COMPARISON_OPS = ("", "_not", "_gt", "_lt", "_gte", "_lte")
_STRING_OPS = (
    "_contains",
    "_not_contains",
    "_starts_with",
    "_not_starts_with",
    "_ends_with",
    "_not_ends_with",
)
_ENUM_VALUE = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class APISchemaError(Exception):
    """The entity schema cannot be turned into an API schema."""


def lower_camel(name: str) -> str:
    return name[:1].lower() + name[1:]


def pluralize(name: str) -> str:
    """English plural of a (camel-cased) type name."""
    lower = name.lower()
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"


def entity_field_names(type_name: str) -> tuple:
    """The root field names for a single entity and a collection of a type."""
    singular = lower_camel(type_name)
    plural = pluralize(singular)
    if plural == singular:
        plural = f"{singular}_collection"
    return singular, plural


def api_schema(document: DocumentNode, default_first: int = DEFAULT_FIRST) -> DocumentNode:
    """Derive the API schema from an entity schema.

    The result contains the entity types (with collection arguments on list
    fields that reference entities), an ``OrderDirection`` enum, an
    ``T_orderBy`` enum and a ``T_filter`` input for every entity type, and
    the root ``Query`` and ``Subscription`` types.
    """
    for definition in document.definitions:
        if isinstance(definition, TypeDefinitionNode) and definition.name.value in RESERVED_TYPES:
            raise APISchemaError(f"Type {definition.name.value} is reserved by the API schema")

    entity_types = [
        d
        for d in document.definitions
        if isinstance(d, (ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode))
    ]
    entity_names = {t.name.value for t in entity_types}
    if not entity_types:
        raise APISchemaError("Schema does not define any entity types")

    definitions: List[DefinitionNode] = []
    for definition in document.definitions:
        if isinstance(definition, (ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode)):
            definitions.append(_add_collection_arguments(definition, entity_names, default_first))
        else:
            definitions.append(definition)

    generated: List[str] = [_missing_scalars(document), "enum OrderDirection { asc desc }"]
    for entity_type in entity_types:
        generated.append(_order_by_enum(entity_type))
        generated.append(_filter_input(entity_type, entity_names))
    root_fields = "\n".join(
        _root_fields(entity_type.name.value, default_first) for entity_type in entity_types
    )
    generated.append(f"type Query {{\n{root_fields}\n}}")
    generated.append(f"type Subscription {{\n{root_fields}\n}}")

    definitions.extend(parse("\n\n".join(s for s in generated if s)).definitions)
    return DocumentNode(definitions=tuple(definitions))


def _missing_scalars(document: DocumentNode) -> str:
    declared = {
        d.name.value for d in document.definitions if isinstance(d, ScalarTypeDefinitionNode)
    }
    used: Set[str] = set()
    for definition in document.definitions:
        for field in getattr(definition, "fields", None) or ():
            used.add(sast.unwrap_named_type(field.type))
    return "\n".join(
        f"scalar {name}" for name in GRAPH_SCALARS if name in used and name not in declared
    )


def _collection_arguments(type_name: str, default_first: int) -> str:
    return (
        f"skip: Int = 0, first: Int = {default_first}, orderBy: {type_name}_orderBy, "
        f"orderDirection: OrderDirection, where: {type_name}_filter"
    )


def _root_fields(type_name: str, default_first: int) -> str:
    singular, plural = entity_field_names(type_name)
    return (
        f"  {singular}(id: ID!): {type_name}\n"
        f"  {plural}({_collection_arguments(type_name, default_first)}): [{type_name}!]!"
    )


def _parse_arguments(arguments: str) -> Sequence[InputValueDefinitionNode]:
    document = parse(f"type Arguments {{ field({arguments}): Int }}", no_location=True)
    return document.definitions[0].fields[0].arguments


def _add_collection_arguments(type_definition, entity_names: Set[str], default_first: int):
    fields = []
    for field in type_definition.fields or ():
        target = sast.unwrap_named_type(field.type)
        if sast.is_list_type(field.type) and target in entity_names and not field.arguments:
            field = FieldDefinitionNode(
                name=field.name,
                description=field.description,
                arguments=_parse_arguments(_collection_arguments(target, default_first)),
                type=field.type,
                directives=field.directives,
                loc=field.loc,
            )
        fields.append(field)
    return type_definition.__class__(
        name=type_definition.name,
        description=type_definition.description,
        interfaces=type_definition.interfaces,
        directives=type_definition.directives,
        fields=tuple(fields),
        loc=type_definition.loc,
    )


def _order_by_enum(entity_type) -> str:
    values = [
        field.name.value
        for field in entity_type.fields or ()
        if _ENUM_VALUE.match(field.name.value)
        and field.name.value not in ("true", "false", "null")
    ]
    return f"enum {entity_type.name.value}_orderBy {{ {' '.join(values)} }}"


def _filter_input(entity_type, entity_names: Set[str]) -> str:
    lines: List[str] = []
    for field in entity_type.fields or ():
        if sast.get_derived_from(field) is not None:
            continue
        lines.extend(_filter_fields(field, entity_names))
    body = "\n".join(f"  {line}" for line in lines)
    return f"input {entity_type.name.value}_filter {{\n{body}\n}}"


def _filter_fields(field: FieldDefinitionNode, entity_names: Set[str]) -> Iterable[str]:
    name = field.name.value
    target = sast.unwrap_named_type(field.type)
    # References to other entities are filtered by id
    input_type = "String" if target in entity_names else target

    if sast.is_list_type(field.type):
        list_type = f"[{input_type}!]"
        return [f"{name}{op}: {list_type}" for op in ("", "_not", "_contains", "_not_contains")]

    if target in entity_names or target == "String":
        ops = _COMPARISON_OPS + ("_in", "_not_in") + _STRING_OPS
    elif target in _NUMERIC_SCALARS:
        ops = _COMPARISON_OPS + ("_in", "_not_in")
    else:
        # Booleans, enums and opaque scalars such as Bytes
        ops = ("", "_not", "_in", "_not_in")

    return [
        f"{name}{op}: [{input_type}!]" if op in ("_in", "_not_in") else f"{name}{op}: {input_type}"
        for op in ops
    ]


__all__ = ["APISchemaError", "api_schema", "entity_field_names", "lower_camel", "pluralize"]
