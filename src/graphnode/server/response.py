"""HTTP responses of the GraphQL server."""

from __future__ import annotations

from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..data.query import QueryResult
from .errors import GraphQLServerError

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
OPTIONS_HEADERS = {**CORS_HEADERS, "Access-Control-Allow-Headers": "Content-Type"}


def query_result_response(result: QueryResult) -> JSONResponse:
    """Serialize a query result; field errors still yield ``200 OK``."""
    return JSONResponse(content=result.to_dict(), status_code=200, headers=CORS_HEADERS)


def error_response(error: GraphQLServerError) -> JSONResponse:
    return JSONResponse(
        content={"errors": [error.to_dict()]},
        status_code=error.status_code,
        headers=CORS_HEADERS,
    )


def options_response() -> Response:
    return Response(content=b"", status_code=200, headers=OPTIONS_HEADERS)


def not_found_response() -> PlainTextResponse:
    return PlainTextResponse("Not found", status_code=404)


__all__ = [
    "CORS_HEADERS",
    "error_response",
    "not_found_response",
    "options_response",
    "query_result_response",
]
