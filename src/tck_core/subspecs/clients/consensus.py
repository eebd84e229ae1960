"""Strongly-consistent read path served by the system under test."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tck_core.types import TransportError

from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)


class ConsensusInfoClient:
    """
    Queries entity info through the system under test's `get<Entity>Info` methods.

    Satisfies `StronglyConsistentSource`.
    """

    def __init__(self, rpc: JsonRpcClient, entity: str = "account") -> None:
        """
        Args:
            rpc: Connected JSON-RPC client.
            entity: Entity kind, e.g. "account", "token" or "topic".
        """
        self.rpc = rpc
        self.entity = entity
        self.method = f"get{entity[:1].upper()}{entity[1:]}Info"

    async def get_entity_info(self, entity_id: str) -> Mapping[str, Any]:
        """Return the current consensus snapshot of an entity."""
        id_param = f"{self.entity}Id"
        result = await self.rpc.request(self.method, {id_param: entity_id})
        if not isinstance(result, Mapping):
            raise TransportError(
                f"{self.method} returned {type(result).__name__}, expected an object",
                url=self.rpc.url,
            )

        logger.debug("Consensus snapshot of %s %s fetched", self.entity, entity_id)
        return result
