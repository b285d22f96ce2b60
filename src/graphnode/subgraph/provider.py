"""Deploys subgraphs from IPFS links and announces them to the node."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..data.graphql import GraphQLParseError
from ..data.schema import Schema
from ..data.subgraph import (
    LinkResolver,
    LinkResolverError,
    ManifestError,
    SubgraphManifest,
    is_valid_subgraph_name,
)
from ..graphql.api_schema import DEFAULT_FIRST, APISchemaError, api_schema
from ..observability import deployed_subgraphs
from ..telemetry import log_structured
from .events import (
    EventProducer,
    SchemaAdded,
    SchemaEvent,
    SchemaRemoved,
    SubgraphAdded,
    SubgraphProviderEvent,
    SubgraphRemoved,
)


class SubgraphProviderError(Exception):
    """Base class for errors raised by the subgraph provider."""


class InvalidSubgraphNameError(SubgraphProviderError):
    def __init__(self, name: str):
        super().__init__(
            f"Invalid subgraph name: {name!r}; names consist of letters, digits, "
            "'-' and '_' in segments separated by '/'"
        )
        self.name = name


class SubgraphNotFoundError(SubgraphProviderError):
    def __init__(self, name_or_id: str):
        super().__init__(f"Subgraph not found: {name_or_id}")
        self.name_or_id = name_or_id


class SubgraphDeployError(SubgraphProviderError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Failed to deploy subgraph {name}: {reason}")
        self.name = name
        self.reason = reason


@dataclass(frozen=True)
class DeployedSubgraph:
    name: str
    manifest: SubgraphManifest
    schema: Schema

    @property
    def id(self) -> str:
        return self.manifest.id


class SubgraphProvider:
    """Keeps track of deployed subgraphs by name.

    Emits ``SubgraphProviderEvent`` values through ``subgraph_events`` and
    ``SchemaEvent`` values through ``schema_events``.
    """

    def __init__(self, resolver: LinkResolver, default_first: int = DEFAULT_FIRST):
        self.resolver = resolver
        self.default_first = default_first
        self.subgraph_events: EventProducer[SubgraphProviderEvent] = EventProducer("subgraph")
        self.schema_events: EventProducer[SchemaEvent] = EventProducer("schema")
        self._deployments: Dict[str, DeployedSubgraph] = {}
        self._lock = asyncio.Lock()

    async def deploy(self, name: str, link: str) -> DeployedSubgraph:
        """Deploy the subgraph behind ``link`` under ``name``.

        An existing deployment with the same name is replaced.
        """
        if not is_valid_subgraph_name(name):
            raise InvalidSubgraphNameError(name)

        try:
            manifest = await SubgraphManifest.resolve(link, self.resolver, name)
            document = api_schema(manifest.schema.document, self.default_first)
        except (LinkResolverError, ManifestError, GraphQLParseError, APISchemaError) as exc:
            log_structured("warning", "subgraph_deploy_failed", name=name, link=link, error=str(exc))
            raise SubgraphDeployError(name, str(exc)) from exc

        deployment = DeployedSubgraph(
            name=name, manifest=manifest, schema=manifest.schema.with_document(document)
        )

        async with self._lock:
            previous = self._deployments.pop(name, None)
            if previous is not None:
                await self._emit_removal(previous, keep_subgraph=previous.id == deployment.id)
            self._deployments[name] = deployment
            await self.subgraph_events.emit(SubgraphAdded(manifest))
            await self.schema_events.emit(SchemaAdded(deployment.schema))
            deployed_subgraphs().set(len(self._deployments))

        log_structured("info", "subgraph_deployed", name=name, subgraph_id=deployment.id)
        return deployment

    async def remove(self, name_or_id: str) -> DeployedSubgraph:
        async with self._lock:
            deployment = self._find(name_or_id)
            if deployment is None:
                raise SubgraphNotFoundError(name_or_id)
            del self._deployments[deployment.name]
            await self._emit_removal(deployment)
            deployed_subgraphs().set(len(self._deployments))

        log_structured("info", "subgraph_removed", name=deployment.name, subgraph_id=deployment.id)
        return deployment

    def list(self) -> List[Tuple[str, str]]:
        """Return ``(name, id)`` pairs of all deployments, ordered by name."""
        return sorted((d.name, d.id) for d in self._deployments.values())

    def get(self, name_or_id: str) -> Optional[DeployedSubgraph]:
        return self._find(name_or_id)

    def _find(self, name_or_id: str) -> Optional[DeployedSubgraph]:
        deployment = self._deployments.get(name_or_id)
        if deployment is not None:
            return deployment
        for candidate in self._deployments.values():
            if candidate.id == name_or_id:
                return candidate
        return None

    async def _emit_removal(self, deployment: DeployedSubgraph, keep_subgraph: bool = False) -> None:
        await self.schema_events.emit(SchemaRemoved(deployment.name, deployment.id))
        # Other names may still point at the same subgraph
        still_deployed = any(d.id == deployment.id for d in self._deployments.values())
        if not keep_subgraph and not still_deployed:
            await self.subgraph_events.emit(SubgraphRemoved(deployment.id))


__all__ = [
    "DeployedSubgraph",
    "InvalidSubgraphNameError",
    "SubgraphDeployError",
    "SubgraphNotFoundError",
    "SubgraphProvider",
    "SubgraphProviderError",
]
