"""Coercion of GraphQL input values.

Argument literals from a query document are coerced with ``coerce_value``,
variable values decoded from JSON with ``coerce_input_value``. Both return
``Undefined`` when the value is not valid for the type.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from graphql.language import (
    BooleanValueNode,
    EnumTypeDefinitionNode,
    EnumValueNode,
    FloatValueNode,
    InputObjectTypeDefinitionNode,
    IntValueNode,
    ListTypeNode,
    ListValueNode,
    NamedTypeNode,
    NonNullTypeNode,
    NullValueNode,
    ObjectValueNode,
    ScalarTypeDefinitionNode,
    StringValueNode,
    TypeDefinitionNode,
    TypeNode,
    ValueNode,
    VariableNode,
)
from graphql.pyutils import Undefined

TypeResolver = Callable[[str], Optional[TypeDefinitionNode]]

_MIN_INT = -(2**31)
_MAX_INT = 2**31 - 1


def _enum_values(type_definition: EnumTypeDefinitionNode) -> set:
    return {value.name.value for value in type_definition.values or ()}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_int(value: int) -> bool:
    return _MIN_INT <= value <= _MAX_INT


# Literals


def coerce_value(
    value: ValueNode,
    type_node: TypeNode,
    resolve_type: TypeResolver,
    variables: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Coerce an AST literal to a Python value of the given input type."""
    if isinstance(type_node, NonNullTypeNode):
        if isinstance(value, NullValueNode):
            return Undefined
        coerced = coerce_value(value, type_node.type, resolve_type, variables)
        return Undefined if coerced is None else coerced

    if isinstance(value, VariableNode):
        # Variable values have been coerced against their declared types already
        return (variables or {}).get(value.name.value)

    if isinstance(value, NullValueNode):
        return None

    if isinstance(type_node, ListTypeNode):
        if isinstance(value, ListValueNode):
            items = [coerce_value(v, type_node.type, resolve_type, variables) for v in value.values]
            return Undefined if any(item is Undefined for item in items) else items
        item = coerce_value(value, type_node.type, resolve_type, variables)
        return Undefined if item is Undefined else [item]

    assert isinstance(type_node, NamedTypeNode)
    type_definition = resolve_type(type_node.name.value)

    if isinstance(type_definition, ScalarTypeDefinitionNode):
        return _coerce_scalar_literal(value, type_definition.name.value)
    if isinstance(type_definition, EnumTypeDefinitionNode):
        if isinstance(value, EnumValueNode) and value.value in _enum_values(type_definition):
            return value.value
        return Undefined
    if isinstance(type_definition, InputObjectTypeDefinitionNode):
        if not isinstance(value, ObjectValueNode):
            return Undefined
        provided = {field.name.value: field.value for field in value.fields}
        return _coerce_input_object(
            provided,
            type_definition,
            lambda v, t: coerce_value(v, t, resolve_type, variables),
            resolve_type,
        )
    return Undefined


def _coerce_scalar_literal(value: ValueNode, name: str) -> Any:
    if name == "Int":
        if isinstance(value, IntValueNode):
            number = int(value.value)
            return number if _valid_int(number) else Undefined
        return Undefined
    if name == "Float":
        if isinstance(value, (IntValueNode, FloatValueNode)):
            return float(value.value)
        return Undefined
    if name == "String":
        return value.value if isinstance(value, StringValueNode) else Undefined
    if name == "Boolean":
        return value.value if isinstance(value, BooleanValueNode) else Undefined
    if name == "ID":
        if isinstance(value, (StringValueNode, IntValueNode)):
            return str(value.value)
        return Undefined

    # Custom scalars (BigInt, Bytes, ...) take any primitive literal
    if isinstance(value, (StringValueNode, BooleanValueNode)):
        return value.value
    if isinstance(value, IntValueNode):
        return int(value.value)
    if isinstance(value, FloatValueNode):
        return float(value.value)
    return Undefined


# JSON values


def coerce_input_value(value: Any, type_node: TypeNode, resolve_type: TypeResolver) -> Any:
    """Coerce a JSON-decoded value to a Python value of the given input type."""
    if isinstance(type_node, NonNullTypeNode):
        if value is None:
            return Undefined
        return coerce_input_value(value, type_node.type, resolve_type)

    if value is None:
        return None

    if isinstance(type_node, ListTypeNode):
        if isinstance(value, list):
            items = [coerce_input_value(v, type_node.type, resolve_type) for v in value]
            return Undefined if any(item is Undefined for item in items) else items
        item = coerce_input_value(value, type_node.type, resolve_type)
        return Undefined if item is Undefined else [item]

    assert isinstance(type_node, NamedTypeNode)
    type_definition = resolve_type(type_node.name.value)

    if isinstance(type_definition, ScalarTypeDefinitionNode):
        return _coerce_scalar_input(value, type_definition.name.value)
    if isinstance(type_definition, EnumTypeDefinitionNode):
        if isinstance(value, str) and value in _enum_values(type_definition):
            return value
        return Undefined
    if isinstance(type_definition, InputObjectTypeDefinitionNode):
        if not isinstance(value, dict):
            return Undefined
        return _coerce_input_object(
            value,
            type_definition,
            lambda v, t: coerce_input_value(v, t, resolve_type),
            resolve_type,
        )
    return Undefined


def _coerce_scalar_input(value: Any, name: str) -> Any:
    if name == "Int":
        return value if _is_int(value) and _valid_int(value) else Undefined
    if name == "Float":
        if _is_int(value) or isinstance(value, float):
            return float(value)
        return Undefined
    if name == "String":
        return value if isinstance(value, str) else Undefined
    if name == "Boolean":
        return value if isinstance(value, bool) else Undefined
    if name == "ID":
        if isinstance(value, str):
            return value
        return str(value) if _is_int(value) else Undefined
    if isinstance(value, (str, bool, int, float)):
        return value
    return Undefined


def _coerce_input_object(
    provided: Mapping[str, Any],
    type_definition: InputObjectTypeDefinitionNode,
    coerce: Callable[[Any, TypeNode], Any],
    resolve_type: TypeResolver,
) -> Any:
    fields = {field.name.value: field for field in type_definition.fields or ()}
    if any(name not in fields for name in provided):
        return Undefined

    result: Dict[str, Any] = {}
    for name, field in fields.items():
        if name in provided:
            coerced = coerce(provided[name], field.type)
        elif field.default_value is not None:
            coerced = coerce_value(field.default_value, field.type, resolve_type)
        elif isinstance(field.type, NonNullTypeNode):
            return Undefined
        else:
            continue
        if coerced is Undefined:
            return Undefined
        result[name] = coerced
    return result


__all__ = ["TypeResolver", "Undefined", "coerce_input_value", "coerce_value"]
