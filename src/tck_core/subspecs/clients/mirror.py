"""
Eventually-consistent read path served by the mirror REST API.

The mirror replicates consensus state with a lag, so a 404 for a freshly
created entity is expected and is reported as a mismatch the poller can wait
out. Everything that prevents getting an answer at all is a transport failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Self

import httpx

from tck_core.types import MirrorEntityNotFound, TransportError

from .config import DEFAULT_TIMEOUT, MIRROR_API_PREFIX

logger = logging.getLogger(__name__)


class MirrorNodeClient:
    """
    Fetches entity snapshots from `{base_url}/api/v1/{entity}/{id}`.

    Satisfies `EventuallyConsistentSource`.
    """

    def __init__(
        self,
        base_url: str,
        entity: str = "accounts",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Mirror REST root, e.g. "http://127.0.0.1:5551".
            entity: Collection name, e.g. "accounts", "tokens" or "topics".
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, e.g. `httpx.MockTransport` in tests.
        """
        self.base_url = base_url.rstrip("/")
        self.entity = entity
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    def entity_url(self, entity_id: str) -> str:
        """URL of one entity."""
        return f"{self.base_url}{MIRROR_API_PREFIX}/{self.entity}/{entity_id}"

    async def get_entity_data(self, entity_id: str) -> Mapping[str, Any]:
        """
        Return the currently replicated snapshot of an entity.

        Raises:
            MirrorEntityNotFound: The mirror does not know the entity yet.
            TransportError: No usable response was received.
        """
        url = self.entity_url(entity_id)
        try:
            response = await self._client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as exc:
            raise TransportError(f"Cannot reach mirror at {url}: {exc}", url=url) from exc

        if response.status_code == 404:
            raise MirrorEntityNotFound(url)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Mirror returned HTTP {response.status_code} for {url}",
                url=url,
                status_code=response.status_code,
            ) from exc

        if not response.content:
            raise TransportError(
                f"Empty mirror response for {url}", url=url, status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Malformed mirror response for {url}", url=url, status_code=response.status_code
            ) from exc

        if not isinstance(data, Mapping):
            raise TransportError(
                f"Mirror response for {url} is not an object",
                url=url,
                status_code=response.status_code,
            )
        return data
