"""HTTP endpoints for GraphQL queries and the GraphiQL explorer."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from ..data.schema import Schema
from ..runner import GraphQLRunner
from ..subgraph.registry import SubgraphRegistry
from ..telemetry import log_structured
from .errors import GraphQLServerError, InternalError, UnknownSubgraphError
from .request import parse_graphql_request
from .response import error_response, not_found_response, options_response, query_result_response

ASSETS_DIR = Path(__file__).parent / "assets"

router = APIRouter()


@lru_cache(maxsize=1)
def graphiql_page() -> str:
    return (ASSETS_DIR / "index.html").read_text(encoding="utf-8")


def _registry(request: Request) -> SubgraphRegistry:
    return request.app.state.registry


def _runner(request: Request) -> GraphQLRunner:
    return request.app.state.runner


async def _serve_query(request: Request, schema: Optional[Schema]) -> Response:
    body = await request.body()
    try:
        if schema is None:
            raise InternalError("No schema available to query")
        query = parse_graphql_request(body, schema)
        result = await _runner(request).run_query(query)
    except GraphQLServerError as exc:
        log_structured(
            "warning",
            "graphql_request_rejected",
            status=exc.status_code,
            error_type=exc.__class__.__name__,
            error_message=str(exc),
        )
        return error_response(exc)
    return query_result_response(result)


@router.get("/", include_in_schema=False)
async def graphiql(request: Request) -> Response:
    if not request.app.state.settings.graphiql_enabled:
        return not_found_response()
    return HTMLResponse(graphiql_page())


@router.post("/graphql")
async def query_default_subgraph(request: Request) -> Response:
    return await _serve_query(request, _registry(request).default())


@router.post("/subgraphs/name/{name:path}/graphql")
async def query_subgraph_by_name(name: str, request: Request) -> Response:
    schema = _registry(request).by_name(name)
    if schema is None:
        return error_response(UnknownSubgraphError(name))
    return await _serve_query(request, schema)


@router.post("/subgraphs/id/{subgraph_id}/graphql")
async def query_subgraph_by_id(subgraph_id: str, request: Request) -> Response:
    schema = _registry(request).by_id(subgraph_id)
    if schema is None:
        return error_response(UnknownSubgraphError(subgraph_id))
    return await _serve_query(request, schema)


@router.options("/graphql", include_in_schema=False)
@router.options("/subgraphs/name/{name:path}/graphql", include_in_schema=False)
@router.options("/subgraphs/id/{subgraph_id}/graphql", include_in_schema=False)
async def preflight() -> Response:
    return options_response()


__all__ = ["graphiql_page", "router"]
