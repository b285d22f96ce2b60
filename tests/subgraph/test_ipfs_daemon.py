"""Resolves links against a real IPFS daemon when ``GRAPH_NODE_IPFS_URL`` is set."""

from __future__ import annotations

import os

import httpx
import pytest

from graphnode.data.subgraph import LinkResolverError
from graphnode.subgraph import IpfsLinkResolver

IPFS_URL = os.environ.get("GRAPH_NODE_IPFS_URL")

pytestmark = [
    pytest.mark.ipfs,
    pytest.mark.skipif(not IPFS_URL, reason="GRAPH_NODE_IPFS_URL is not set"),
]

SCHEMA = b"type Thing @entity { id: ID! }\n"


@pytest.mark.asyncio
async def test_cat_added_file():
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(
            f"{IPFS_URL}/api/v0/add", files={"file": ("schema.graphql", SCHEMA)}
        )
        response.raise_for_status()
        file_hash = response.json()["Hash"]

        resolver = IpfsLinkResolver(IPFS_URL, client=client)
        assert await resolver.cat(f"/ipfs/{file_hash}") == SCHEMA


@pytest.mark.asyncio
async def test_unknown_paths_fail():
    resolver = IpfsLinkResolver(IPFS_URL, timeout=10.0)
    try:
        with pytest.raises(LinkResolverError):
            await resolver.cat("/ipfs/not-a-valid-hash")
    finally:
        await resolver.aclose()
