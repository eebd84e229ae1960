"""Tests for the mirror REST client."""

from __future__ import annotations

import httpx
import pytest

from tck_core.subspecs.clients import MirrorNodeClient
from tck_core.types import MirrorEntityNotFound, TransportError

BASE_URL = "http://mirror.test:5551/"


def _client(response: httpx.Response, seen: list[httpx.Request] | None = None) -> MirrorNodeClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    return MirrorNodeClient(BASE_URL, transport=httpx.MockTransport(handler))


class TestGetEntityData:
    """Tests for fetching entity snapshots."""

    @pytest.mark.asyncio
    async def test_snapshot(self) -> None:
        """A 200 response is returned as a mapping."""
        seen: list[httpx.Request] = []
        payload = {"account": "0.0.1001", "memo": "hi", "key": {"_type": "ED25519", "key": "ab"}}
        async with _client(httpx.Response(200, json=payload), seen) as mirror:
            data = await mirror.get_entity_data("0.0.1001")

        assert data == payload
        assert str(seen[0].url) == "http://mirror.test:5551/api/v1/accounts/0.0.1001"

    @pytest.mark.asyncio
    async def test_entity_collection(self) -> None:
        """The collection name is part of the URL."""
        mirror = MirrorNodeClient("http://m", entity="tokens")
        assert mirror.entity_url("0.0.7") == "http://m/api/v1/tokens/0.0.7"
        await mirror.aclose()

    @pytest.mark.asyncio
    async def test_not_found_is_a_mismatch(self) -> None:
        """404 means not replicated yet."""
        async with _client(httpx.Response(404, json={"_status": {}})) as mirror:
            with pytest.raises(MirrorEntityNotFound) as exc_info:
                await mirror.get_entity_data("0.0.1001")
        assert isinstance(exc_info.value, AssertionError)
        assert exc_info.value.url.endswith("/accounts/0.0.1001")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 500, 503])
    async def test_error_status(self, status: int) -> None:
        """Other error statuses are transport failures."""
        async with _client(httpx.Response(status)) as mirror:
            with pytest.raises(TransportError) as exc_info:
                await mirror.get_entity_data("0.0.1001")
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_empty_body(self) -> None:
        """An empty 200 is a transport failure."""
        async with _client(httpx.Response(200, content=b"")) as mirror:
            with pytest.raises(TransportError, match="Empty"):
                await mirror.get_entity_data("0.0.1001")

    @pytest.mark.asyncio
    async def test_not_an_object(self) -> None:
        """A JSON array is not a snapshot."""
        async with _client(httpx.Response(200, json=[1, 2])) as mirror:
            with pytest.raises(TransportError, match="not an object"):
                await mirror.get_entity_data("0.0.1001")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Timeouts are transport failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with MirrorNodeClient(BASE_URL, transport=httpx.MockTransport(handler)) as mirror:
            with pytest.raises(TransportError, match="Cannot reach mirror"):
                await mirror.get_entity_data("0.0.1001")
