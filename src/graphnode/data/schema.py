"""Data types for dealing with GraphQL schemas."""

from __future__ import annotations

from typing import Optional

from graphql import GraphQLSchema, GraphQLSyntaxError, build_ast_schema, parse, print_ast
from graphql.language import DocumentNode

from .graphql import GraphQLParseError


class Schema:
    """A named subgraph schema.

    ``document`` is the parsed SDL. The executable ``graphql_schema`` is only
    needed for introspection and is built on first use.
    """

    def __init__(self, name: str, id: str, document: DocumentNode):
        self.name = name
        self.id = id
        self.document = document
        self._graphql_schema: Optional[GraphQLSchema] = None

    @classmethod
    def parse(cls, name: str, id: str, sdl: str) -> "Schema":
        try:
            document = parse(sdl)
        except GraphQLSyntaxError as exc:
            raise GraphQLParseError.from_syntax_error(exc) from exc
        return cls(name=name, id=id, document=document)

    @property
    def graphql_schema(self) -> GraphQLSchema:
        if self._graphql_schema is None:
            self._graphql_schema = build_ast_schema(
                self.document, assume_valid=True, assume_valid_sdl=True
            )
        return self._graphql_schema

    def with_document(self, document: DocumentNode) -> "Schema":
        return Schema(name=self.name, id=self.id, document=document)

    def sdl(self) -> str:
        return print_ast(self.document)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return (self.name, self.id, self.sdl()) == (other.name, other.id, other.sdl())

    def __hash__(self) -> int:
        return hash((self.name, self.id))

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, id={self.id!r})"


__all__ = ["Schema"]
