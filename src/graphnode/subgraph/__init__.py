"""Subgraph deployment: provider, registry and instance manager."""

from __future__ import annotations

from .events import (
    EventProducer,
    SchemaAdded,
    SchemaRemoved,
    SubgraphAdded,
    SubgraphRemoved,
)
from .instance_manager import SubgraphInstance, SubgraphInstanceManager
from .link_resolver import IpfsLinkResolver
from .provider import (
    DeployedSubgraph,
    InvalidSubgraphNameError,
    SubgraphDeployError,
    SubgraphNotFoundError,
    SubgraphProvider,
    SubgraphProviderError,
)
from .registry import SubgraphRegistry

__all__ = [
    "DeployedSubgraph",
    "EventProducer",
    "InvalidSubgraphNameError",
    "IpfsLinkResolver",
    "SchemaAdded",
    "SchemaRemoved",
    "SubgraphAdded",
    "SubgraphDeployError",
    "SubgraphInstance",
    "SubgraphInstanceManager",
    "SubgraphNotFoundError",
    "SubgraphProvider",
    "SubgraphProviderError",
    "SubgraphRegistry",
    "SubgraphRemoved",
]
