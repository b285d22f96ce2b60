"""Decoding of GraphQL requests received over HTTP."""

from __future__ import annotations

import json
from typing import Any, Optional

from graphql import GraphQLSyntaxError, parse
from graphql.language import DocumentNode

from ..data.graphql import GraphQLParseError
from ..data.query import Query, QueryError, QueryVariables
from ..data.schema import Schema
from .errors import ClientError, QueryErrorResponse


def parse_query_document(query: str) -> DocumentNode:
    """Parse a query string, raising ``GraphQLParseError`` on syntax errors."""
    try:
        return parse(query)
    except GraphQLSyntaxError as exc:
        raise GraphQLParseError.from_syntax_error(exc) from exc


def parse_graphql_request(body: bytes, schema: Schema) -> Query:
    """Turn the body of a ``POST`` request into a ``Query`` against ``schema``.

    The body is a JSON object with a ``query`` string and optional
    ``variables`` object and ``operationName`` string.
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise QueryErrorResponse(QueryError(exc)) from exc

    try:
        data: Any = json.loads(text)
    except ValueError as exc:
        raise ClientError("Invalid JSON") from exc

    if not isinstance(data, dict):
        raise ClientError("Request data is not an object")

    if "query" not in data:
        raise ClientError('The "query" field missing in request data')
    query = data["query"]
    if not isinstance(query, str):
        raise ClientError('The "query" field is not a string')

    variables = data.get("variables")
    if variables is not None and not isinstance(variables, dict):
        raise ClientError("Invalid query variables provided")

    operation_name: Optional[str] = data.get("operationName")
    if operation_name is not None and not isinstance(operation_name, str):
        raise ClientError('The "operationName" field is not a string')

    try:
        document = parse_query_document(query)
    except GraphQLParseError as exc:
        raise QueryErrorResponse(QueryError(exc)) from exc

    return Query(
        schema=schema,
        document=document,
        variables=QueryVariables.from_mapping(variables),
        operation_name=operation_name,
    )


__all__ = ["parse_graphql_request", "parse_query_document"]
