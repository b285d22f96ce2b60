"""Execution of GraphQL queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from graphql.language import OperationType

from ..data.query import Query, QueryResult
from . import ast as qast
from .errors import ExecutionError, NoRootQueryObjectType, NotSupported
from .execution import Execution, coerce_variable_values
from .resolver import Resolver


@dataclass
class QueryExecutionOptions:
    """Options available for query execution."""

    resolver: Resolver
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))


def execute_query(query: Query, options: QueryExecutionOptions) -> QueryResult:
    """Execute a query and return its result.

    Only ``query`` operations (including the ``{ ... }`` shorthand) run;
    anything else yields a ``NotSupported`` error.
    """
    logger = options.logger
    logger.debug("Execute query against subgraph %s", query.schema.id)

    try:
        operation = qast.get_operation(query.document, query.operation_name)
    except ExecutionError as exc:
        return QueryResult.from_error(exc)

    if operation.operation != OperationType.QUERY:
        return QueryResult.from_error(NotSupported("Only queries are supported"))

    root_type = qast.get_root_query_type(query.schema.document)
    if root_type is None:
        return QueryResult.from_error(NoRootQueryObjectType())

    try:
        variables = coerce_variable_values(query.schema.document, operation, query.variables)
    except ExecutionError as exc:
        return QueryResult.from_error(exc)

    execution = Execution(
        schema=query.schema,
        document=query.document,
        resolver=options.resolver,
        variables=variables,
        operation=operation,
        logger=logger,
    )
    data = execution.execute_selection_set([operation.selection_set], root_type, None)
    return QueryResult(data=data, errors=execution.errors)


__all__ = ["QueryExecutionOptions", "execute_query"]
