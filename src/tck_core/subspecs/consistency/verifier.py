"""
Consistency verifier.

Confirms that an observable fact about entity state holds, given that one of
the read paths is only eventually consistent.

State machine::

    IDLE -> POLLING -> SUCCEEDED
                    -> EXHAUSTED           (attempt budget spent)
                    -> DEADLINE_EXCEEDED   (deadline hit before a pause or during an attempt)
                    -> TRANSPORT_FAILED    (a source stayed unreachable)

Each attempt runs the caller's assertion. The assertion usually compares a
strongly-consistent snapshot, fetched once outside the loop, with a fresh
snapshot from the eventually-consistent source.

Two failure channels are kept apart:

- Mismatches (any exception other than TransportError) consume the attempt
  budget and are retried after a fixed delay. When the budget is spent, the
  exception object raised by the final attempt is re-raised unchanged, so
  callers see the real mismatch rather than a generic timeout.
- Transport failures (TransportError) are retried inside the current attempt
  with exponential backoff on their own small budget. They never consume
  attempts, and once their budget is spent they propagate immediately.

Sleeping is cooperative (`asyncio.sleep`), and task cancellation is never
swallowed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from tck_core.types import TransportError

from .config import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    TRANSPORT_BACKOFF_MULTIPLIER,
    TRANSPORT_INITIAL_BACKOFF,
    TRANSPORT_MAX_BACKOFF,
    TRANSPORT_MAX_RETRIES,
)

logger = logging.getLogger(__name__)

Assertion = Callable[[], Awaitable[Any] | Any]
"""A zero-argument check that raises on mismatch. May be sync or async."""

Sleep = Callable[[float], Awaitable[Any]]
"""Cooperative sleep used between attempts."""


class VerifierState(Enum):
    """Lifecycle of one verification call."""

    IDLE = auto()
    POLLING = auto()
    SUCCEEDED = auto()
    EXHAUSTED = auto()
    DEADLINE_EXCEEDED = auto()
    TRANSPORT_FAILED = auto()


class _AttemptTimedOut(TimeoutError):
    """An attempt was still pending when the deadline expired."""


@dataclass(frozen=True, slots=True)
class TransportRetryPolicy:
    """Bounded exponential backoff for unreachable sources."""

    max_retries: int = TRANSPORT_MAX_RETRIES
    """Retries after the first failed request. Zero disables retrying."""

    initial_backoff: float = TRANSPORT_INITIAL_BACKOFF
    """Delay before the first retry, in seconds."""

    multiplier: float = TRANSPORT_BACKOFF_MULTIPLIER
    """Growth factor between retries."""

    max_backoff: float = TRANSPORT_MAX_BACKOFF
    """Cap on any single delay, in seconds."""

    def backoff(self, retry: int) -> float:
        """Delay before retry number `retry` (zero-based)."""
        return min(self.initial_backoff * self.multiplier**retry, self.max_backoff)


@dataclass(frozen=True, slots=True)
class Deadline:
    """
    Absolute point in time after which a verification must stop.

    Measured on the monotonic clock so wall-clock adjustments do not matter.
    """

    expires_at: float
    """Expiry as a `time.monotonic()` value."""

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """A deadline `seconds` from now."""
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left. Negative once expired."""
        return self.expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self.remaining() <= 0

    def allows(self, pause: float) -> bool:
        """True if pausing for `pause` seconds would still end before expiry."""
        return self.remaining() > pause


@dataclass(slots=True)
class ConsistencyVerifier:
    """
    One verification call and its bookkeeping.

    Instances are single-use: `run()` may be awaited once.
    """

    assertion: Assertion
    """Check to run on every attempt."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    """Attempt budget for mismatches."""

    delay: float = DEFAULT_RETRY_DELAY
    """Fixed pause between attempts, in seconds."""

    deadline: Deadline | None = None
    """Optional hard stop."""

    transport_policy: TransportRetryPolicy = TransportRetryPolicy()
    """Retry policy for TransportError."""

    sleep: Sleep = asyncio.sleep
    """Pause implementation. Injected by tests to observe timing."""

    state: VerifierState = VerifierState.IDLE
    """Current lifecycle state."""

    attempts: int = 0
    """Assertion attempts made so far, not counting transport retries."""

    delays: int = 0
    """Pauses taken between attempts."""

    transport_retries: int = 0
    """Transport retries taken across all attempts."""

    async def run(self) -> None:
        """
        Poll until the assertion passes.

        Raises:
            ValueError: If max_attempts is below 1.
            RuntimeError: If the verifier was already run.
            TransportError: If a source stayed unreachable past its retry budget.
            Exception: Whatever the final attempt raised, unchanged, once the
                attempt budget or the deadline is exhausted.
            TimeoutError: If the deadline expired while the first attempt was
                still pending, so there is no mismatch to report.
        """
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.state is not VerifierState.IDLE:
            raise RuntimeError(f"Verifier already run (state {self.state.name})")

        self.state = VerifierState.POLLING
        last_error: Exception | None = None

        while True:
            self.attempts += 1
            try:
                await self._attempt_within_deadline()
            except TransportError:
                self.state = VerifierState.TRANSPORT_FAILED
                raise
            except _AttemptTimedOut as exc:
                self.state = VerifierState.DEADLINE_EXCEEDED
                logger.warning(
                    "Consistency check stopped by deadline during attempt %d", self.attempts
                )
                if last_error is not None:
                    raise last_error from exc
                raise
            except Exception as exc:
                last_error = exc
                if self.attempts >= self.max_attempts:
                    self.state = VerifierState.EXHAUSTED
                    logger.warning(
                        "Consistency check failed after %d attempt(s): %s", self.attempts, exc
                    )
                    raise

                if self.deadline is not None and not self.deadline.allows(self.delay):
                    self.state = VerifierState.DEADLINE_EXCEEDED
                    logger.warning(
                        "Consistency check stopped by deadline after %d attempt(s): %s",
                        self.attempts,
                        exc,
                    )
                    raise

                logger.debug(
                    "Attempt %d/%d failed, retrying in %.3fs: %s",
                    self.attempts,
                    self.max_attempts,
                    self.delay,
                    exc,
                )
                self.delays += 1
                await self.sleep(self.delay)
            else:
                self.state = VerifierState.SUCCEEDED
                if self.attempts > 1:
                    logger.info("Consistency check passed on attempt %d", self.attempts)
                return

    async def _attempt_within_deadline(self) -> None:
        """Run one attempt, cut short if the deadline expires while it is pending."""
        if self.deadline is None:
            await self._attempt()
            return

        scope = asyncio.timeout(max(self.deadline.remaining(), 0.0))
        try:
            async with scope:
                await self._attempt()
        except TimeoutError as exc:
            if scope.expired():
                raise _AttemptTimedOut(
                    f"Deadline expired during attempt {self.attempts}"
                ) from exc
            raise

    async def _attempt(self) -> None:
        """Run the assertion once, retrying transport failures only."""
        retry = 0
        while True:
            try:
                result = self.assertion()
                if inspect.isawaitable(result):
                    await result
                return
            except TransportError as exc:
                if retry >= self.transport_policy.max_retries:
                    logger.warning("Source unreachable after %d retries: %s", retry, exc)
                    raise

                pause = self.transport_policy.backoff(retry)
                if self.deadline is not None and not self.deadline.allows(pause):
                    raise

                retry += 1
                self.transport_retries += 1
                logger.debug("Transport failure, retry %d in %.3fs: %s", retry, pause, exc)
                await self.sleep(pause)


async def verify(
    assertion: Assertion,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
    *,
    deadline: Deadline | None = None,
    transport_policy: TransportRetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """
    Poll `assertion` until it passes or the budget runs out.

    Args:
        assertion: Zero-argument check that raises on mismatch.
        max_attempts: Attempt budget for mismatches.
        delay: Fixed pause between attempts, in seconds.
        deadline: Optional hard stop.
        transport_policy: Retry policy for TransportError.
        sleep: Pause implementation.

    Raises:
        TransportError: If a source stayed unreachable.
        Exception: The final attempt's own exception, unchanged.
    """
    verifier = ConsistencyVerifier(
        assertion=assertion,
        max_attempts=max_attempts,
        delay=delay,
        deadline=deadline,
        transport_policy=transport_policy or TransportRetryPolicy(),
        sleep=sleep,
    )
    await verifier.run()


@dataclass(frozen=True, slots=True)
class ConsistencyCheck:
    """A verification request that can be built now and run later."""

    assertion: Assertion
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay: float = DEFAULT_RETRY_DELAY

    async def run(self, *, deadline: Deadline | None = None, sleep: Sleep = asyncio.sleep) -> None:
        """Run the check. See `verify`."""
        await verify(
            self.assertion,
            self.max_attempts,
            self.delay,
            deadline=deadline,
            sleep=sleep,
        )
