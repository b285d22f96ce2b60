"""Helpers for working with query and schema ASTs."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Union

from graphql.language import (
    ArgumentNode,
    BooleanValueNode,
    DirectiveNode,
    DocumentNode,
    FieldDefinitionNode,
    FieldNode,
    FragmentDefinitionNode,
    InterfaceTypeDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    NameNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    SelectionNode,
    StringValueNode,
    TypeDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    ValueNode,
    VariableNode,
)

from .errors import OperationNameRequired, OperationNotFound

BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")

_BUILTIN_SCALAR_NODES = {
    name: ScalarTypeDefinitionNode(name=NameNode(value=name), directives=(), description=None)
    for name in BUILTIN_SCALARS
}


# Query ASTs


def get_operations(document: DocumentNode) -> List[OperationDefinitionNode]:
    return [d for d in document.definitions if isinstance(d, OperationDefinitionNode)]


def get_operation_name(operation: OperationDefinitionNode) -> Optional[str]:
    return operation.name.value if operation.name is not None else None


def get_operation(document: DocumentNode, name: Optional[str] = None) -> OperationDefinitionNode:
    """Return the operation to execute.

    Without a name the document must contain exactly one operation.
    """
    operations = get_operations(document)
    if name is None:
        if len(operations) == 1:
            return operations[0]
        raise OperationNameRequired()
    if not operations:
        raise OperationNameRequired()
    for operation in operations:
        if get_operation_name(operation) == name:
            return operation
    raise OperationNotFound(name)


def get_fragment(document: DocumentNode, name: str) -> Optional[FragmentDefinitionNode]:
    for definition in document.definitions:
        if isinstance(definition, FragmentDefinitionNode) and definition.name.value == name:
            return definition
    return None


def get_fragments(document: DocumentNode) -> List[FragmentDefinitionNode]:
    return [d for d in document.definitions if isinstance(d, FragmentDefinitionNode)]


def get_response_key(field: FieldNode) -> str:
    return field.alias.value if field.alias is not None else field.name.value


def get_argument_value(arguments: Optional[Sequence[ArgumentNode]], name: str) -> Optional[ValueNode]:
    for argument in arguments or ():
        if argument.name.value == name:
            return argument.value
    return None


def _directive(selection: SelectionNode, name: str) -> Optional[DirectiveNode]:
    for directive in selection.directives or ():
        if directive.name.value == name:
            return directive
    return None


def _directive_condition(
    directive: DirectiveNode, variables: Optional[Mapping[str, Any]]
) -> Optional[bool]:
    value = get_argument_value(directive.arguments, "if")
    if isinstance(value, BooleanValueNode):
        return value.value
    if isinstance(value, VariableNode):
        resolved = (variables or {}).get(value.name.value)
        if isinstance(resolved, bool):
            return resolved
    return None


def skip_selection(selection: SelectionNode, variables: Optional[Mapping[str, Any]] = None) -> bool:
    """Whether ``@skip(if: true)`` applies to the selection."""
    directive = _directive(selection, "skip")
    return directive is not None and _directive_condition(directive, variables) is True


def include_selection(selection: SelectionNode, variables: Optional[Mapping[str, Any]] = None) -> bool:
    """Whether the selection is included; ``@include(if: false)`` excludes it."""
    directive = _directive(selection, "include")
    return directive is None or _directive_condition(directive, variables) is not False


# Schema ASTs


def get_named_type(schema: DocumentNode, name: str) -> Optional[TypeDefinitionNode]:
    for definition in schema.definitions:
        if isinstance(definition, TypeDefinitionNode) and definition.name.value == name:
            return definition
    return _BUILTIN_SCALAR_NODES.get(name)


def get_type_name(type_definition: TypeDefinitionNode) -> str:
    return type_definition.name.value


def _root_operation_type(
    schema: DocumentNode, operation: OperationType, default_name: str
) -> Optional[ObjectTypeDefinitionNode]:
    name = default_name
    for definition in schema.definitions:
        if isinstance(definition, SchemaDefinitionNode):
            for operation_type in definition.operation_types:
                if operation_type.operation == operation:
                    name = operation_type.type.name.value
    named_type = get_named_type(schema, name)
    return named_type if isinstance(named_type, ObjectTypeDefinitionNode) else None


def get_root_query_type(schema: DocumentNode) -> Optional[ObjectTypeDefinitionNode]:
    return _root_operation_type(schema, OperationType.QUERY, "Query")


def get_root_subscription_type(schema: DocumentNode) -> Optional[ObjectTypeDefinitionNode]:
    return _root_operation_type(schema, OperationType.SUBSCRIPTION, "Subscription")


def get_field_type(
    object_type: Union[ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode], name: str
) -> Optional[FieldDefinitionNode]:
    for field in object_type.fields or ():
        if field.name.value == name:
            return field
    return None


def unwrap_named_type(type_node: TypeNode) -> str:
    """Return the name of the named type inside list and non-null wrappers."""
    while isinstance(type_node, (ListTypeNode, NonNullTypeNode)):
        type_node = type_node.type
    assert isinstance(type_node, NamedTypeNode)
    return type_node.name.value


def is_list_type(type_node: TypeNode) -> bool:
    if isinstance(type_node, NonNullTypeNode):
        type_node = type_node.type
    return isinstance(type_node, ListTypeNode)


def implements_interface(object_type: ObjectTypeDefinitionNode, interface_name: str) -> bool:
    return any(named.name.value == interface_name for named in object_type.interfaces or ())


def get_possible_types(
    schema: DocumentNode, type_definition: TypeDefinitionNode
) -> List[ObjectTypeDefinitionNode]:
    """Object types a value of the given (possibly abstract) type can have."""
    if isinstance(type_definition, ObjectTypeDefinitionNode):
        return [type_definition]
    if isinstance(type_definition, InterfaceTypeDefinitionNode):
        name = type_definition.name.value
        return [
            d
            for d in schema.definitions
            if isinstance(d, ObjectTypeDefinitionNode) and implements_interface(d, name)
        ]
    if isinstance(type_definition, UnionTypeDefinitionNode):
        members = [get_named_type(schema, named.name.value) for named in type_definition.types or ()]
        return [m for m in members if isinstance(m, ObjectTypeDefinitionNode)]
    return []


def get_derived_from(field: FieldDefinitionNode) -> Optional[str]:
    """Return the ``field`` argument of a ``@derivedFrom`` directive, if any."""
    for directive in field.directives or ():
        if directive.name.value == "derivedFrom":
            value = get_argument_value(directive.arguments, "field")
            if isinstance(value, StringValueNode):
                return value.value
    return None


__all__ = [
    "BUILTIN_SCALARS",
    "get_argument_value",
    "get_derived_from",
    "get_field_type",
    "get_fragment",
    "get_named_type",
    "get_operation",
    "get_possible_types",
    "get_response_key",
    "get_root_query_type",
    "get_root_subscription_type",
    "get_type_name",
    "include_selection",
    "skip_selection",
    "unwrap_named_type",
]
