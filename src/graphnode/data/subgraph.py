"""Data types for dealing with subgraphs."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from .graphql import GraphQLParseError
from .schema import Schema

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")
_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


class ManifestError(Exception):
    """The subgraph manifest or one of the files it links to is malformed."""


class LinkResolverError(Exception):
    """A link could not be resolved to its contents."""


class LinkResolver(ABC):
    """Resolves content-addressed links (e.g. ``/ipfs/Qm...``) to bytes."""

    @abstractmethod
    async def cat(self, link: str) -> bytes:
        ...


def is_valid_subgraph_name(name: str) -> bool:
    return bool(_NAME_PATTERN.match(name))


def link_to_id(link: str) -> str:
    """Strip the ``/ipfs/`` prefix from a link, leaving the content hash."""
    token = link.strip()
    if token.startswith("/ipfs/"):
        token = token[len("/ipfs/"):]
    token = token.strip("/")
    if not _ID_PATTERN.match(token):
        raise ManifestError(f"Invalid subgraph link: {link}")
    return token


@dataclass(frozen=True)
class DataSource:
    kind: str
    name: str
    network: str | None
    source: Dict[str, Any] = field(default_factory=dict)
    mapping: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DataSource":
        try:
            kind = raw["kind"]
            name = raw["name"]
        except (KeyError, TypeError) as exc:
            raise ManifestError(f"Data source is missing a required field: {exc}") from None
        return cls(
            kind=str(kind),
            name=str(name),
            network=raw.get("network"),
            source=dict(raw.get("source") or {}),
            mapping=dict(raw.get("mapping") or {}),
        )


@dataclass
class SubgraphManifest:
    id: str
    location: str
    spec_version: str
    schema: Schema
    data_sources: List[DataSource] = field(default_factory=list)

    @classmethod
    async def resolve(cls, link: str, resolver: LinkResolver, name: str) -> "SubgraphManifest":
        """Fetch the manifest behind ``link`` and the schema file it references."""
        subgraph_id = link_to_id(link)
        raw = _load_yaml(await resolver.cat(link), what="manifest")

        schema_link = _schema_link(raw)
        content = await resolver.cat(schema_link)
        try:
            schema = Schema.parse(name=name, id=subgraph_id, sdl=content.decode("utf-8"))
        except (GraphQLParseError, UnicodeDecodeError) as exc:
            raise ManifestError(f"Invalid schema {schema_link}: {exc}") from exc

        data_sources = [DataSource.from_dict(item) for item in raw.get("dataSources") or []]
        return cls(
            id=subgraph_id,
            location=link,
            spec_version=str(raw.get("specVersion", "0.0.1")),
            schema=schema,
            data_sources=data_sources,
        )

    def networks(self) -> Tuple[str, ...]:
        return tuple(sorted({ds.network for ds in self.data_sources if ds.network}))


def _load_yaml(content: bytes, *, what: str) -> Dict[str, Any]:
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid {what}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ManifestError(f"Invalid {what}: expected a mapping")
    return raw


def _schema_link(raw: Mapping[str, Any]) -> str:
    schema = raw.get("schema")
    file_ref = schema.get("file") if isinstance(schema, Mapping) else None
    if isinstance(file_ref, Mapping):
        file_ref = file_ref.get("/")
    if not isinstance(file_ref, str) or not file_ref:
        raise ManifestError("Manifest does not link to a schema file")
    return file_ref


__all__ = [
    "DataSource",
    "LinkResolver",
    "LinkResolverError",
    "ManifestError",
    "SubgraphManifest",
    "is_valid_subgraph_name",
    "link_to_id",
]
