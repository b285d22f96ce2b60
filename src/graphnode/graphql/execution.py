"""GraphQL execution against a schema document and a pluggable resolver."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from graphql.language import (
    DocumentNode,
    EnumTypeDefinitionNode,
    FieldDefinitionNode,
    FieldNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    InterfaceTypeDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
    ScalarTypeDefinitionNode,
    SelectionSetNode,
    TypeDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    VariableNode,
)

from ..data.graphql import Position
from ..data.schema import Schema
from . import ast as qast
from .coercion import Undefined, coerce_input_value, coerce_value
from .errors import (
    AbstractTypeError,
    ExecutionError,
    InvalidArgumentError,
    InvalidVariableTypeError,
    ListValueError,
    MissingArgumentError,
    MissingVariableError,
    NamedTypeError,
    NonNullError,
    ResolveEntityError,
)
from .introspection import INTROSPECTION_FIELDS, IntrospectionResolver
from .resolver import Resolver, ResolverError

# Response key -> fields with that key, in document order
GroupedFieldSet = Dict[str, List[FieldNode]]

_OBJECT_LIKE = (ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode, UnionTypeDefinitionNode)


def coerce_variable_values(
    schema: DocumentNode,
    operation: OperationDefinitionNode,
    variables: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Coerce the JSON variable values of a request against the operation's definitions."""
    provided = variables or {}
    coerced: Dict[str, Any] = {}

    def resolve_type(name: str) -> Optional[TypeDefinitionNode]:
        return qast.get_named_type(schema, name)

    for definition in operation.variable_definitions or ():
        name = definition.variable.name.value
        position = Position.from_node(definition)
        if name not in provided:
            if definition.default_value is not None:
                value = coerce_value(definition.default_value, definition.type, resolve_type)
                if value is Undefined:
                    raise InvalidVariableTypeError(position, name)
                coerced[name] = value
            elif isinstance(definition.type, NonNullTypeNode):
                raise MissingVariableError(position, name)
            continue

        value = coerce_input_value(provided[name], definition.type, resolve_type)
        if value is Undefined:
            raise InvalidVariableTypeError(position, name)
        coerced[name] = value
    return coerced


def does_fragment_type_apply(
    schema: DocumentNode,
    object_type: ObjectTypeDefinitionNode,
    type_condition: Optional[NamedTypeNode],
) -> bool:
    """Whether a fragment with the given type condition applies to ``object_type``."""
    if type_condition is None:
        return True
    named_type = qast.get_named_type(schema, type_condition.name.value)
    if isinstance(named_type, ObjectTypeDefinitionNode):
        return named_type.name.value == object_type.name.value
    if isinstance(named_type, InterfaceTypeDefinitionNode):
        return qast.implements_interface(object_type, named_type.name.value)
    if isinstance(named_type, UnionTypeDefinitionNode):
        return any(
            member.name.value == object_type.name.value for member in named_type.types or ()
        )
    return False


def collect_fields(
    schema: DocumentNode,
    document: DocumentNode,
    object_type: ObjectTypeDefinitionNode,
    selection_sets: Sequence[SelectionSetNode],
    variables: Optional[Mapping[str, Any]] = None,
    visited_fragments: Optional[Set[str]] = None,
) -> GroupedFieldSet:
    """Group the fields of selection sets by response key, in document order."""
    visited_fragments = set(visited_fragments or ())
    grouped_fields: GroupedFieldSet = {}

    def merge(selection_set: SelectionSetNode) -> None:
        nested = collect_fields(
            schema, document, object_type, [selection_set], variables, visited_fragments
        )
        for response_key, group in nested.items():
            grouped_fields.setdefault(response_key, []).extend(group)

    for selection_set in selection_sets:
        for selection in selection_set.selections:
            if qast.skip_selection(selection, variables):
                continue
            if not qast.include_selection(selection, variables):
                continue

            if isinstance(selection, FieldNode):
                response_key = qast.get_response_key(selection)
                grouped_fields.setdefault(response_key, []).append(selection)

            elif isinstance(selection, FragmentSpreadNode):
                # The same spread twice in a selection set is only collected once
                name = selection.name.value
                if name in visited_fragments:
                    continue
                visited_fragments.add(name)
                fragment = qast.get_fragment(document, name)
                if fragment is not None and does_fragment_type_apply(
                    schema, object_type, fragment.type_condition
                ):
                    merge(fragment.selection_set)

            elif isinstance(selection, InlineFragmentNode):
                if does_fragment_type_apply(schema, object_type, selection.type_condition):
                    merge(selection.selection_set)

    return grouped_fields


class Execution:
    """State of a single execution of an operation.

    Field errors do not abort the execution: the field is set to ``None`` and
    the error is appended to ``errors``.
    """

    def __init__(
        self,
        schema: Schema,
        document: DocumentNode,
        resolver: Resolver,
        variables: Optional[Mapping[str, Any]] = None,
        operation: Optional[OperationDefinitionNode] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.schema = schema
        self.document = document
        self.resolver = resolver
        self.variables: Dict[str, Any] = dict(variables or {})
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.introspection_resolver = IntrospectionResolver(schema, self.logger)
        self.root_query_type = qast.get_root_query_type(schema.document)
        # The current field stack, e.g. users > friends > name
        self.fields: List[FieldNode] = []
        self.errors: List[ExecutionError] = []

    def execute_selection_set(
        self,
        selection_sets: Sequence[SelectionSetNode],
        object_type: ObjectTypeDefinitionNode,
        object_value: Optional[Mapping[str, Any]],
    ) -> Optional[Dict[str, Any]]:
        """Execute the merged selection sets against a value of ``object_type``."""
        result: Dict[str, Any] = {}
        grouped_field_set = self.collect_fields(object_type, selection_sets)

        for response_key, fields in grouped_field_set.items():
            field_name = fields[0].name.value

            if field_name == "__typename":
                result[response_key] = object_type.name.value
                continue

            if field_name in INTROSPECTION_FIELDS and self._is_root_query_type(object_type):
                try:
                    result[response_key] = self.introspection_resolver.resolve_fields(
                        fields,
                        qast.get_fragments(self.document),
                        self.operation.variable_definitions if self.operation else (),
                        self.variables,
                    )
                except ExecutionError as exc:
                    result[response_key] = None
                    self.errors.append(exc)
                continue

            field_definition = qast.get_field_type(object_type, field_name)
            if field_definition is None:
                continue

            self.fields.append(fields[0])
            try:
                result[response_key] = self.execute_field(
                    object_type, object_value, fields[0], field_definition, fields
                )
            except ExecutionError as exc:
                result[response_key] = None
                self.errors.append(exc)
            finally:
                self.fields.pop()

        return result or None

    def collect_fields(
        self,
        object_type: ObjectTypeDefinitionNode,
        selection_sets: Sequence[SelectionSetNode],
    ) -> GroupedFieldSet:
        return collect_fields(
            self.schema.document, self.document, object_type, selection_sets, self.variables
        )

    def execute_field(
        self,
        object_type: ObjectTypeDefinitionNode,
        object_value: Optional[Mapping[str, Any]],
        field: FieldNode,
        field_definition: FieldDefinitionNode,
        fields: List[FieldNode],
    ) -> Any:
        argument_values = self.coerce_argument_values(field, field_definition)
        value = self.resolve_field_value(
            object_value, field, field_definition, field_definition.type, argument_values
        )
        return self.complete_value(field, field_definition.type, fields, value)

    def resolve_field_value(
        self,
        object_value: Optional[Mapping[str, Any]],
        field: FieldNode,
        field_definition: FieldDefinitionNode,
        field_type: TypeNode,
        argument_values: Dict[str, Any],
    ) -> Any:
        if isinstance(field_type, NonNullTypeNode):
            return self.resolve_field_value(
                object_value, field, field_definition, field_type.type, argument_values
            )

        is_list = isinstance(field_type, ListTypeNode)
        type_name = qast.unwrap_named_type(field_type)
        named_type = qast.get_named_type(self.schema.document, type_name)
        if named_type is None:
            raise NamedTypeError(type_name)

        field_name = field.name.value
        try:
            if isinstance(named_type, _OBJECT_LIKE):
                resolve = self.resolver.resolve_objects if is_list else self.resolver.resolve_object
                return resolve(object_value, field_name, field_definition, named_type, argument_values)

            # Enum and scalar values are read from the parent object
            if not isinstance(object_value, Mapping):
                return None
            value = object_value.get(field_name)
            if isinstance(named_type, EnumTypeDefinitionNode):
                if is_list:
                    return self.resolver.resolve_enum_values(field_definition, named_type, value)
                return self.resolver.resolve_enum_value(field_definition, named_type, value)
            if isinstance(named_type, ScalarTypeDefinitionNode):
                if is_list:
                    return self.resolver.resolve_scalar_values(field_definition, named_type, value)
                return self.resolver.resolve_scalar_value(field_definition, named_type, value)
        except ResolverError as exc:
            raise ResolveEntityError(Position.from_node(field), str(exc)) from exc

        raise NamedTypeError(type_name)

    def complete_value(
        self,
        field: FieldNode,
        field_type: TypeNode,
        fields: List[FieldNode],
        resolved_value: Any,
    ) -> Any:
        """Check a resolved value against the field type and complete its selection."""
        if isinstance(field_type, NonNullTypeNode):
            completed = self.complete_value(field, field_type.type, fields, resolved_value)
            if completed is None:
                raise NonNullError(Position.from_node(field), field.name.value)
            return completed

        if resolved_value is None:
            return None

        if isinstance(field_type, ListTypeNode):
            if not isinstance(resolved_value, (list, tuple)):
                raise ListValueError(Position.from_node(field), field.name.value)
            return [self.complete_value(field, field_type.type, fields, item) for item in resolved_value]

        assert isinstance(field_type, NamedTypeNode)
        named_type = qast.get_named_type(self.schema.document, field_type.name.value)

        if isinstance(named_type, (ScalarTypeDefinitionNode, EnumTypeDefinitionNode)):
            return resolved_value

        selection_sets = [f.selection_set for f in fields if f.selection_set is not None]

        if isinstance(named_type, ObjectTypeDefinitionNode):
            return self.execute_selection_set(selection_sets, named_type, resolved_value)

        if isinstance(named_type, (InterfaceTypeDefinitionNode, UnionTypeDefinitionNode)):
            object_type = self.resolve_abstract_type(named_type, resolved_value)
            return self.execute_selection_set(selection_sets, object_type, resolved_value)

        raise NamedTypeError(field_type.name.value)

    def resolve_abstract_type(
        self, abstract_type: TypeDefinitionNode, value: Any
    ) -> ObjectTypeDefinitionNode:
        object_type = self.resolver.resolve_abstract_type(self.schema.document, abstract_type, value)
        if object_type is None:
            raise AbstractTypeError(qast.get_type_name(abstract_type))
        return object_type

    def coerce_argument_values(
        self, field: FieldNode, field_definition: FieldDefinitionNode
    ) -> Dict[str, Any]:
        coerced: Dict[str, Any] = {}
        position = Position.from_node(field)

        for argument in field_definition.arguments or ():
            name = argument.name.value
            value = qast.get_argument_value(field.arguments, name)

            # An unset variable counts as an absent argument
            if isinstance(value, VariableNode) and value.name.value not in self.variables:
                value = None

            if value is None:
                if argument.default_value is not None:
                    coerced[name] = coerce_value(
                        argument.default_value, argument.type, self._resolve_type
                    )
                elif isinstance(argument.type, NonNullTypeNode):
                    raise MissingArgumentError(position, name)
                continue

            coerced_value = coerce_value(value, argument.type, self._resolve_type, self.variables)
            if coerced_value is Undefined:
                raise InvalidArgumentError(position, name, value)
            coerced[name] = coerced_value

        return coerced

    def _resolve_type(self, name: str) -> Optional[TypeDefinitionNode]:
        return qast.get_named_type(self.schema.document, name)

    def _is_root_query_type(self, object_type: ObjectTypeDefinitionNode) -> bool:
        return (
            self.root_query_type is not None
            and self.root_query_type.name.value == object_type.name.value
        )


__all__ = [
    "Execution",
    "GroupedFieldSet",
    "coerce_variable_values",
    "collect_fields",
    "does_fragment_type_apply",
]
