"""Keeps one running instance per deployed subgraph."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..data.store import Store
from ..data.subgraph import SubgraphManifest
from ..telemetry import log_structured
from .events import SubgraphAdded, SubgraphProviderEvent, SubgraphRemoved

logger = logging.getLogger(__name__)


@dataclass
class SubgraphInstance:
    manifest: SubgraphManifest
    data_sources: Tuple[str, ...]

    @classmethod
    def from_manifest(cls, manifest: SubgraphManifest) -> "SubgraphInstance":
        return cls(
            manifest=manifest,
            data_sources=tuple(source.name for source in manifest.data_sources),
        )

    @property
    def id(self) -> str:
        return self.manifest.id


class SubgraphInstanceManager:
    """Consumes ``SubgraphProviderEvent``s.

    Removing a subgraph drops its instance and all of its entities.
    """

    def __init__(self, store: Store):
        self.store = store
        self.instances: Dict[str, SubgraphInstance] = {}

    async def handle_event(self, event: SubgraphProviderEvent) -> None:
        if isinstance(event, SubgraphAdded):
            self._handle_subgraph_added(event.manifest)
        elif isinstance(event, SubgraphRemoved):
            self._handle_subgraph_removed(event.id)

    def get(self, subgraph_id: str) -> Optional[SubgraphInstance]:
        return self.instances.get(subgraph_id)

    def _handle_subgraph_added(self, manifest: SubgraphManifest) -> None:
        instance = SubgraphInstance.from_manifest(manifest)
        self.instances[manifest.id] = instance
        log_structured(
            "info",
            "subgraph_instance_started",
            subgraph_id=manifest.id,
            data_sources=list(instance.data_sources),
        )

    def _handle_subgraph_removed(self, subgraph_id: str) -> None:
        if self.instances.pop(subgraph_id, None) is None:
            logger.warning("Removal of unknown subgraph instance %s", subgraph_id)
        self.store.remove_subgraph(subgraph_id)
        log_structured("info", "subgraph_instance_stopped", subgraph_id=subgraph_id)


__all__ = ["SubgraphInstance", "SubgraphInstanceManager"]
