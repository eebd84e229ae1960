"""
Consistency verification constants.

Polling budgets are fixed rather than adaptive so the worst-case wall-clock
cost of a check is known up front: DEFAULT_MAX_ATTEMPTS * DEFAULT_RETRY_DELAY
must stay well inside a scenario's overall timeout.
"""

from __future__ import annotations

from typing import Final

DEFAULT_MAX_ATTEMPTS: Final[int] = 100
"""Polls of the eventually-consistent source before giving up."""

DEFAULT_RETRY_DELAY: Final[float] = 0.2
"""Fixed pause between polls in seconds."""

TRANSPORT_MAX_RETRIES: Final[int] = 3
"""Retries of a single poll that failed to reach its source."""

TRANSPORT_INITIAL_BACKOFF: Final[float] = 1.0
"""First transport retry delay in seconds."""

TRANSPORT_BACKOFF_MULTIPLIER: Final[float] = 2.0
"""Growth factor between consecutive transport retries."""

TRANSPORT_MAX_BACKOFF: Final[float] = 8.0
"""Upper bound on a single transport retry delay in seconds."""
