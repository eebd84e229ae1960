"""Tests for the consensus info client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from tck_core.subspecs.clients import ConsensusInfoClient, JsonRpcClient
from tck_core.types import TransportError


def _rpc(result: Any, seen: list[dict[str, Any]]) -> JsonRpcClient:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return JsonRpcClient("http://sut.test", transport=httpx.MockTransport(handler))


class TestConsensusInfoClient:
    """Tests for `get<Entity>Info` queries."""

    @pytest.mark.asyncio
    async def test_account_info(self) -> None:
        """Accounts are queried through getAccountInfo."""
        seen: list[dict[str, Any]] = []
        async with _rpc({"accountId": "0.0.5", "accountMemo": "m"}, seen) as rpc:
            info = await ConsensusInfoClient(rpc).get_entity_info("0.0.5")

        assert info["accountMemo"] == "m"
        assert seen[0]["method"] == "getAccountInfo"
        assert seen[0]["params"] == {"accountId": "0.0.5"}

    @pytest.mark.asyncio
    async def test_other_entity(self) -> None:
        """The entity kind selects method and id parameter."""
        seen: list[dict[str, Any]] = []
        async with _rpc({"tokenId": "0.0.9"}, seen) as rpc:
            client = ConsensusInfoClient(rpc, entity="token")
            await client.get_entity_info("0.0.9")

        assert client.method == "getTokenInfo"
        assert seen[0]["params"] == {"tokenId": "0.0.9"}

    @pytest.mark.asyncio
    async def test_single_query_per_call(self) -> None:
        """Each call is exactly one request."""
        seen: list[dict[str, Any]] = []
        async with _rpc({}, seen) as rpc:
            await ConsensusInfoClient(rpc).get_entity_info("0.0.5")
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_non_object_result(self) -> None:
        """Only object results are snapshots."""
        async with _rpc("oops", []) as rpc:
            with pytest.raises(TransportError, match="expected an object"):
                await ConsensusInfoClient(rpc).get_entity_info("0.0.5")
