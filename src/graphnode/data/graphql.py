"""GraphQL-related data types shared by the executor and the servers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from graphql import GraphQLSyntaxError
from graphql.language import Node, get_location


@dataclass(frozen=True)
class Position:
    """A 1-based line/column position inside a GraphQL document."""

    line: int
    column: int

    @classmethod
    def from_node(cls, node: Optional[Node]) -> "Position":
        loc = getattr(node, "loc", None)
        if loc is None or loc.source is None:
            return cls(line=0, column=0)
        location = get_location(loc.source, loc.start)
        return cls(line=location.line, column=location.column)

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column}


class GraphQLError(Exception):
    """Base class for errors that can point at locations in a GraphQL document."""

    def locations(self) -> List[Position]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": str(self),
            "locations": [position.to_dict() for position in self.locations()],
        }


class GraphQLParseError(GraphQLError):
    """A GraphQL document could not be parsed."""

    def __init__(self, message: str, locations: Optional[List[Position]] = None):
        super().__init__(message)
        self.message = message
        self._locations = list(locations or [])

    @classmethod
    def from_syntax_error(cls, error: GraphQLSyntaxError) -> "GraphQLParseError":
        # Only keep the description, the location is reported separately
        message = getattr(error, "description", None) or error.message
        if message.startswith("Syntax Error:"):
            message = message[len("Syntax Error:"):].strip()
        locations = [
            Position(line=location.line, column=location.column)
            for location in (error.locations or [])
        ]
        return cls(message, locations)

    def locations(self) -> List[Position]:
        return list(self._locations)


__all__ = ["GraphQLError", "GraphQLParseError", "Position"]
