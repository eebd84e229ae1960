"""
Dual read path reconciliation.

Checks that the strongly-consistent source and the eventually-consistent
source both report the expected state for an entity:

1. The consensus snapshot is fetched once. It is authoritative, so a
   mismatch there fails immediately.
2. The mirror snapshot is fetched on every attempt through the consistency
   verifier until it agrees or the budget runs out.

Keys get special treatment because each source wraps them differently:
single keys are compared by their raw key bytes. Composite keys are
compared by suffix, in the direction each source nests the encoding.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from tck_core.subspecs.keys import (
    assert_same_raw_key,
    detect_algorithm,
    equivalent,
)
from tck_core.types import EncodingMismatch

from .config import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY
from .snapshot import is_unset, lookup, mirror_key_value, to_mirror_field, values_match
from .sources import EventuallyConsistentSource, StronglyConsistentSource
from .verifier import Assertion, Deadline, Sleep, TransportRetryPolicy, verify

logger = logging.getLogger(__name__)


def _assert_key_matches(
    expected: str, actual: str | None, *, label: str, actual_is_envelope: bool
) -> None:
    """
    Compare an expected key with an observed one, single or composite.

    Composite encodings nest one way. The consensus side reports the inner
    message, which must be a suffix of `expected`. The mirror reports the
    full envelope, which must end with `expected`.
    """
    algorithm = detect_algorithm(expected)
    if algorithm is not None:
        assert_same_raw_key(expected, actual, algorithm, label=label)
        return

    if not expected or not actual:
        raise EncodingMismatch(expected, actual, label=label)
    outer, inner = (actual, expected) if actual_is_envelope else (expected, actual)
    if not equivalent(outer, inner) or len(inner) > len(outer):
        raise EncodingMismatch(expected, actual, label=label)


class EntityReconciler:
    """Verifies entity fields across the consensus and mirror read paths."""

    def __init__(
        self,
        consensus: StronglyConsistentSource,
        mirror: EventuallyConsistentSource,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY,
        deadline: Deadline | None = None,
        transport_policy: TransportRetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.consensus = consensus
        self.mirror = mirror
        self.max_attempts = max_attempts
        self.delay = delay
        self.deadline = deadline
        self.transport_policy = transport_policy
        self.sleep = sleep

    async def _poll_mirror(self, assertion: Assertion) -> None:
        await verify(
            assertion,
            self.max_attempts,
            self.delay,
            deadline=self.deadline,
            transport_policy=self.transport_policy,
            sleep=self.sleep,
        )

    async def _poll_mirror_field(
        self,
        entity_id: str,
        mirror_name: str,
        expected: Any,
        convert: Callable[[Any], Any] | None,
    ) -> None:
        async def check_mirror() -> None:
            data = await self.mirror.get_entity_data(entity_id)
            value = lookup(data, mirror_name)
            if convert is not None and not is_unset(value):
                value = convert(value)
            if not values_match(expected, value):
                raise AssertionError(
                    f"mirror {mirror_name} of {entity_id}: expected {expected!r}, got {value!r}"
                )

        await self._poll_mirror(check_mirror)

    async def verify_field(
        self,
        entity_id: str,
        field: str,
        expected: Any,
        *,
        mirror_field: str | None = None,
        convert: Callable[[Any], Any] | None = None,
    ) -> None:
        """
        Assert both sources report `expected` for a field.

        Args:
            entity_id: Entity to inspect.
            field: Consensus field name (dotted paths allowed).
            expected: Expected value. Sentinels match each other.
            mirror_field: Mirror field name. Defaults to the snake_case of `field`.
            convert: Optional conversion applied to the mirror value before
                comparing, e.g. nanosecond timestamps to seconds.

        Raises:
            AssertionError: If either source disagrees.
        """
        info = await self.consensus.get_entity_info(entity_id)
        consensus_value = lookup(info, field)
        if not values_match(expected, consensus_value):
            raise AssertionError(
                f"consensus {field} of {entity_id}: expected {expected!r}, got {consensus_value!r}"
            )

        await self._poll_mirror_field(
            entity_id, mirror_field or to_mirror_field(field), expected, convert
        )
        logger.debug("Field %s of %s consistent on both sources", field, entity_id)

    async def verify_consistent(
        self,
        entity_id: str,
        field: str,
        *,
        mirror_field: str | None = None,
        convert: Callable[[Any], Any] | None = None,
    ) -> Any:
        """
        Assert the mirror eventually reports what consensus reports now.

        Returns:
            The agreed consensus value.

        Raises:
            AssertionError: If the mirror never catches up.
        """
        info = await self.consensus.get_entity_info(entity_id)
        consensus_value = lookup(info, field)
        await self._poll_mirror_field(
            entity_id, mirror_field or to_mirror_field(field), consensus_value, convert
        )
        return consensus_value

    async def verify_key(
        self,
        entity_id: str,
        field: str,
        expected_key: str,
        *,
        mirror_field: str | None = None,
    ) -> None:
        """
        Assert both sources hold the expected key.

        Single keys are compared by raw key bytes, so DER and raw forms match.
        Composite keys are compared by suffix. The consensus side reports the
        bare KeyList/ThresholdKey message, a suffix of `expected_key`. The
        mirror reports the full envelope, which ends with `expected_key`.

        Raises:
            EncodingMismatch: If either source holds a different key.
        """
        info = await self.consensus.get_entity_info(entity_id)
        consensus_key = mirror_key_value(lookup(info, field))
        _assert_key_matches(
            expected_key, consensus_key, label=f"consensus {field}", actual_is_envelope=False
        )

        mirror_name = mirror_field or to_mirror_field(field)

        async def check_mirror() -> None:
            data = await self.mirror.get_entity_data(entity_id)
            mirror_key = mirror_key_value(lookup(data, mirror_name))
            _assert_key_matches(
                expected_key, mirror_key, label=f"mirror {mirror_name}", actual_is_envelope=True
            )

        await self._poll_mirror(check_mirror)
        logger.debug("Key %s of %s consistent on both sources", field, entity_id)

    async def verify_key_cleared(
        self,
        entity_id: str,
        field: str,
        *,
        mirror_field: str | None = None,
    ) -> None:
        """
        Assert both sources report the key as unset.

        Raises:
            EncodingMismatch: If either source still holds a key.
        """
        info = await self.consensus.get_entity_info(entity_id)
        consensus_key = mirror_key_value(lookup(info, field))
        if not is_unset(consensus_key):
            raise EncodingMismatch(None, consensus_key, label=f"consensus {field}")

        mirror_name = mirror_field or to_mirror_field(field)

        async def check_mirror() -> None:
            data = await self.mirror.get_entity_data(entity_id)
            mirror_key = mirror_key_value(lookup(data, mirror_name))
            if not is_unset(mirror_key):
                raise EncodingMismatch(None, mirror_key, label=f"mirror {mirror_name}")

        await self._poll_mirror(check_mirror)
