"""Application factory wiring the node's components into one ASGI app."""

from __future__ import annotations

import contextlib
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..core.settings import GraphNodeSettings, get_settings
from ..data.store import Store
from ..data.subgraph import LinkResolver
from ..observability import METRICS_PATH, render_latest
from ..runner import GraphQLRunner
from ..store import InMemoryStore
from ..subgraph import (
    IpfsLinkResolver,
    SubgraphInstanceManager,
    SubgraphProvider,
    SubgraphProviderError,
    SubgraphRegistry,
)
from ..telemetry import log_structured
from .admin import ADMIN_PATH, create_admin_router
from .http import router as http_router
from .middleware import access_log_middleware
from .response import not_found_response
from .websocket import router as websocket_router


async def _not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code in (404, 405):
        return not_found_response()
    return await http_exception_handler(request, exc)


async def deploy_configured_subgraphs(
    provider: SubgraphProvider, settings: GraphNodeSettings
) -> None:
    """Deploy the subgraphs named in the settings; failures are logged, not fatal."""
    for name, link in settings.subgraphs:
        try:
            await provider.deploy(name, link)
        except SubgraphProviderError as exc:
            log_structured("error", "startup_deploy_failed", name=name, link=link, error=str(exc))


def create_app(
    settings: Optional[GraphNodeSettings] = None,
    store: Optional[Store] = None,
    link_resolver: Optional[LinkResolver] = None,
) -> FastAPI:
    """Build the FastAPI application of a graph node.

    ``store`` defaults to an ``InMemoryStore`` and ``link_resolver`` to an
    ``IpfsLinkResolver`` for ``settings.ipfs_url``; a resolver created here is
    closed on shutdown.
    """
    settings = settings or get_settings()
    store = store if store is not None else InMemoryStore()
    owns_resolver = link_resolver is None
    if link_resolver is None:
        link_resolver = IpfsLinkResolver(settings.ipfs_url, timeout=settings.ipfs_timeout)

    provider = SubgraphProvider(link_resolver, default_first=settings.default_first)
    registry = SubgraphRegistry()
    instance_manager = SubgraphInstanceManager(store)
    provider.subgraph_events.add_sink(instance_manager.handle_event)
    provider.schema_events.add_sink(registry.handle_schema_event)
    runner = GraphQLRunner(store, settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log_structured(
            "info",
            "graph_node_starting",
            http_host=settings.http_host,
            http_port=settings.http_port,
            ipfs_url=settings.ipfs_url,
        )
        await deploy_configured_subgraphs(provider, settings)
        try:
            yield
        finally:
            if owns_resolver:
                await link_resolver.aclose()
            log_structured("info", "graph_node_stopped")

    app = FastAPI(
        title="Graph Node",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.provider = provider
    app.state.registry = registry
    app.state.instance_manager = instance_manager
    app.state.runner = runner

    app.add_exception_handler(StarletteHTTPException, _not_found_handler)
    app.middleware("http")(access_log_middleware)

    @app.get(METRICS_PATH, include_in_schema=False)
    async def metrics() -> Response:
        payload, content_type = render_latest()
        return Response(content=payload, media_type=content_type)

    if settings.admin_enabled:
        app.include_router(create_admin_router(), prefix=ADMIN_PATH)
    app.include_router(http_router)
    app.include_router(websocket_router)

    return app


__all__ = ["create_app", "deploy_configured_subgraphs"]
