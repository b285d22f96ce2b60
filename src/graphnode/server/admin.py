"""Admin GraphQL API for deploying and removing subgraphs."""

from __future__ import annotations

from typing import Any, Dict, List

import strawberry
from fastapi import Request
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from ..subgraph.provider import DeployedSubgraph, SubgraphProvider

ADMIN_PATH = "/admin/graphql"


@strawberry.type
class Subgraph:
    name: str
    id: str
    location: str
    networks: List[str]
    data_sources: List[str]

    @classmethod
    def from_deployment(cls, deployment: DeployedSubgraph) -> "Subgraph":
        manifest = deployment.manifest
        return cls(
            name=deployment.name,
            id=deployment.id,
            location=manifest.location,
            networks=list(manifest.networks()),
            data_sources=[source.name for source in manifest.data_sources],
        )


def _provider(info: Info) -> SubgraphProvider:
    return info.context["provider"]


@strawberry.type
class Query:
    @strawberry.field
    def subgraphs(self, info: Info) -> List[Subgraph]:
        provider = _provider(info)
        return [Subgraph.from_deployment(provider.get(name)) for name, _ in provider.list()]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def deploy_subgraph(self, info: Info, name: str, link: str) -> Subgraph:
        deployment = await _provider(info).deploy(name, link)
        return Subgraph.from_deployment(deployment)

    @strawberry.mutation
    async def remove_subgraph(self, info: Info, name_or_id: str) -> bool:
        await _provider(info).remove(name_or_id)
        return True


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_admin_context(request: Request) -> Dict[str, Any]:
    return {"provider": request.app.state.provider}


def create_admin_router() -> GraphQLRouter:
    """Mount with ``app.include_router(router, prefix=ADMIN_PATH)``."""
    return GraphQLRouter(schema, context_getter=get_admin_context, graphql_ide=None)


__all__ = ["ADMIN_PATH", "Subgraph", "create_admin_router", "schema"]
