"""Structured access logging middleware."""

from __future__ import annotations

import time
import uuid
from typing import Any, Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response

from ..telemetry import log_structured, request_context

REQUEST_ID_HEADER = "X-Request-Id"


def _subgraph_from_path(path: str) -> str | None:
    for prefix in ("/subgraphs/name/", "/subgraphs/id/"):
        if path.startswith(prefix):
            subgraph = path[len(prefix):]
            if subgraph.endswith("/graphql"):
                subgraph = subgraph[: -len("/graphql")]
            return subgraph or None
    return None


async def access_log_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Emit structured access logs and propagate the request id header."""

    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    subgraph = _subgraph_from_path(request.url.path)

    with request_context(request_id, subgraph=subgraph) as context:
        request.state.request_id = context["request_id"]

        query_params: dict[str, Any] | None = (
            dict(request.query_params.multi_items()) if request.query_params else None
        )
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000.0
            log_structured(
                "error",
                "http_request_failed",
                method=request.method,
                path=request.url.path,
                status=500,
                duration_ms=round(duration_ms, 2),
                client_ip=request.client.host if request.client else None,
                error_type=exc.__class__.__name__,
                error_message=str(exc),
                query_params=query_params,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000.0
        response.headers[REQUEST_ID_HEADER] = context["request_id"]

        log_structured(
            "info",
            "http_request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent", "unknown"),
            query_params=query_params,
        )

    return response


__all__ = ["REQUEST_ID_HEADER", "access_log_middleware"]
