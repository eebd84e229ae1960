"""
Read path protocols.

Any client with matching methods satisfies these protocols, which keeps the
reconciler independent of HTTP, JSON-RPC or in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class StronglyConsistentSource(Protocol):
    """
    Authoritative read path.

    Reflects the most recently accepted write at query time, so callers query
    it once per logical check and never poll it.
    """

    async def get_entity_info(self, entity_id: str) -> Mapping[str, Any]:
        """Return the current snapshot of an entity."""
        ...


class EventuallyConsistentSource(Protocol):
    """
    Lagging read path.

    Reflects recent writes only after a replication delay, so callers poll it
    through the consistency verifier.
    """

    async def get_entity_data(self, entity_id: str) -> Mapping[str, Any]:
        """Return the currently replicated snapshot of an entity."""
        ...
