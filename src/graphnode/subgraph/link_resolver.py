"""Resolves IPFS links through the HTTP API of an IPFS node."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..data.subgraph import LinkResolver, LinkResolverError

LOGGER = logging.getLogger(__name__)

_IPFS_PREFIX = "/ipfs/"


class IpfsLinkResolver(LinkResolver):
    """Fetches file contents with ``/api/v0/cat`` of an IPFS daemon."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def cat(self, link: str) -> bytes:
        path = link[len(_IPFS_PREFIX):] if link.startswith(_IPFS_PREFIX) else link
        url = f"{self.base_url}/api/v0/cat"
        try:
            response = await self._client.post(url, params={"arg": path})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise LinkResolverError(
                f"IPFS returned status {exc.response.status_code} for {link}"
            ) from exc
        except httpx.RequestError as exc:
            LOGGER.warning("IPFS request for %s failed: %s", link, exc)
            raise LinkResolverError(f"Failed to fetch {link} from IPFS: {exc}") from exc
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["IpfsLinkResolver"]
