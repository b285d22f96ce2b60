"""Data types for dealing with GraphQL queries."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from graphql.language import DocumentNode

from .graphql import GraphQLError
from .schema import Schema


class QueryVariables(Dict[str, Any]):
    """Variable values sent along with a query, as decoded from JSON."""

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> Optional["QueryVariables"]:
        if values is None:
            return None
        return cls(values)


class Query:
    """A parsed query to run against a schema."""

    def __init__(
        self,
        schema: Schema,
        document: DocumentNode,
        variables: Optional[QueryVariables] = None,
        operation_name: Optional[str] = None,
    ):
        self.schema = schema
        self.document = document
        self.variables = variables
        self.operation_name = operation_name

    def __repr__(self) -> str:
        return f"Query(schema={self.schema!r}, operation_name={self.operation_name!r})"


class QueryError(Exception):
    """Error caused while processing a query request.

    Wraps either a decoding failure of the request body or a ``GraphQLError``.
    """

    def __init__(self, cause: Union[UnicodeDecodeError, GraphQLError]):
        super().__init__(str(cause))
        self.cause = cause

    @property
    def is_graphql_error(self) -> bool:
        return isinstance(self.cause, GraphQLError)

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.cause, GraphQLError):
            return {
                "locations": [position.to_dict() for position in self.cause.locations()],
                "message": str(self.cause),
            }
        return {"message": str(self.cause)}


class QueryResult:
    """The result of running a query."""

    def __init__(self, data: Any = None, errors: Optional[Iterable[QueryError]] = None):
        self.data = data
        self.errors: List[QueryError] = list(errors or [])

    @classmethod
    def from_error(cls, error: Union[QueryError, GraphQLError]) -> "QueryResult":
        if not isinstance(error, QueryError):
            error = QueryError(error)
        return cls(data=None, errors=[error])

    def add_error(self, error: Union[QueryError, GraphQLError]) -> None:
        if not isinstance(error, QueryError):
            error = QueryError(error)
        self.errors.append(error)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.data is not None:
            payload["data"] = self.data
        if self.errors:
            payload["errors"] = [error.to_dict() for error in self.errors]
        return payload

    def __repr__(self) -> str:
        return f"QueryResult(data={self.data!r}, errors={[str(e) for e in self.errors]!r})"


__all__ = ["Query", "QueryError", "QueryResult", "QueryVariables"]
