"""Answers ``__schema`` and ``__type`` fields of queries."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from graphql import GraphQLError as CoreGraphQLError
from graphql import execute_sync
from graphql.language import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    VariableDefinitionNode,
)

from ..data.schema import Schema
from . import ast as qast
from .errors import IntrospectionError

INTROSPECTION_FIELDS = ("__schema", "__type")


class IntrospectionResolver:
    """Executes introspection fields against the executable form of a schema.

    The entity schema is kept as an SDL document for query execution; for
    introspection it is built into a ``GraphQLSchema`` once and the
    introspection fields are run through graphql-core's executor.
    """

    def __init__(self, schema: Schema, logger: Optional[logging.Logger] = None):
        self.schema = schema
        self.logger = logger or logging.getLogger(__name__)

    def resolve_fields(
        self,
        fields: Sequence[FieldNode],
        fragments: Sequence[FragmentDefinitionNode] = (),
        variable_definitions: Sequence[VariableDefinitionNode] = (),
        variables: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Return the completed value of a group of introspection fields."""
        response_key = qast.get_response_key(fields[0])
        operation = OperationDefinitionNode(
            operation=OperationType.QUERY,
            name=None,
            variable_definitions=tuple(variable_definitions),
            directives=(),
            selection_set=SelectionSetNode(selections=tuple(fields)),
        )
        document = DocumentNode(definitions=(operation, *fragments))

        try:
            graphql_schema = self.schema.graphql_schema
        except (CoreGraphQLError, TypeError) as exc:
            raise IntrospectionError(str(exc)) from exc

        result = execute_sync(graphql_schema, document, variable_values=dict(variables or {}))
        if result.errors:
            self.logger.debug("Introspection of %s failed: %s", self.schema.id, result.errors)
            raise IntrospectionError(result.errors[0].message)
        return (result.data or {}).get(response_key)


__all__ = ["INTROSPECTION_FIELDS", "IntrospectionResolver"]
