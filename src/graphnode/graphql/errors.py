"""GraphQL execution errors."""

from __future__ import annotations

from typing import List

from graphql import print_ast
from graphql.language import ValueNode

from ..data.graphql import GraphQLError, Position


class ExecutionError(GraphQLError):
    """Base class of all errors raised while executing a GraphQL document."""


class OperationNameRequired(ExecutionError):
    def __init__(self) -> None:
        super().__init__("Operation name required")


class OperationNotFound(ExecutionError):
    def __init__(self, name: str):
        super().__init__(f"Operation name not found: {name}")
        self.name = name


class NotSupported(ExecutionError):
    def __init__(self, what: str):
        super().__init__(f"Not supported: {what}")


class NoRootQueryObjectType(ExecutionError):
    def __init__(self) -> None:
        super().__init__("No root Query type defined in the schema")


class NoRootSubscriptionObjectType(ExecutionError):
    def __init__(self) -> None:
        super().__init__("No root Subscription type defined in the schema")


class NamedTypeError(ExecutionError):
    def __init__(self, name: str):
        super().__init__(f"Failed to resolve named type: {name}")
        self.name = name


class AbstractTypeError(ExecutionError):
    def __init__(self, name: str):
        super().__init__(f"Failed to resolve abstract type: {name}")
        self.name = name


class IntrospectionError(ExecutionError):
    def __init__(self, message: str):
        super().__init__(f"Introspection failed: {message}")


class PositionedExecutionError(ExecutionError):
    """An execution error that points at the field or variable that caused it."""

    def __init__(self, position: Position, message: str):
        super().__init__(message)
        self.position = position

    def locations(self) -> List[Position]:
        return [self.position]


class ResolveEntityError(PositionedExecutionError):
    def __init__(self, position: Position, reason: str):
        super().__init__(position, f"Failed to resolve entity: {reason}")


class NonNullError(PositionedExecutionError):
    def __init__(self, position: Position, field_name: str):
        super().__init__(position, f"Null value resolved for non-null field: {field_name}")
        self.field_name = field_name


class ListValueError(PositionedExecutionError):
    def __init__(self, position: Position, field_name: str):
        super().__init__(position, f"Non-list value resolved for list field: {field_name}")
        self.field_name = field_name


class InvalidArgumentError(PositionedExecutionError):
    def __init__(self, position: Position, argument: str, value: ValueNode):
        super().__init__(
            position,
            f'Invalid value provided for argument "{argument}": {print_ast(value)}',
        )
        self.argument = argument


class MissingArgumentError(PositionedExecutionError):
    def __init__(self, position: Position, argument: str):
        super().__init__(position, f"No value provided for required argument: {argument}")
        self.argument = argument


class MissingVariableError(PositionedExecutionError):
    def __init__(self, position: Position, variable: str):
        super().__init__(position, f"No value provided for required variable: {variable}")
        self.variable = variable


class InvalidVariableTypeError(PositionedExecutionError):
    def __init__(self, position: Position, variable: str):
        super().__init__(position, f'Variable "{variable}" has an invalid value')
        self.variable = variable


__all__ = [
    "AbstractTypeError",
    "ExecutionError",
    "IntrospectionError",
    "InvalidArgumentError",
    "InvalidVariableTypeError",
    "ListValueError",
    "MissingArgumentError",
    "MissingVariableError",
    "NamedTypeError",
    "NoRootQueryObjectType",
    "NoRootSubscriptionObjectType",
    "NonNullError",
    "NotSupported",
    "OperationNameRequired",
    "OperationNotFound",
    "ResolveEntityError",
]
