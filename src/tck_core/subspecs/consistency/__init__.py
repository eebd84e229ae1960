"""
Dual-source consistency verification.

Polls an eventually-consistent read path until it agrees with an expectation
or with the strongly-consistent read path.
"""

from .config import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY
from .reconcile import EntityReconciler
from .snapshot import (
    UNSET_SENTINELS,
    is_unset,
    lookup,
    mirror_key_value,
    to_mirror_field,
    values_match,
)
from .sources import EventuallyConsistentSource, StronglyConsistentSource
from .verifier import (
    ConsistencyCheck,
    ConsistencyVerifier,
    Deadline,
    TransportRetryPolicy,
    VerifierState,
    verify,
)

__all__ = [
    # Verifier
    "verify",
    "ConsistencyCheck",
    "ConsistencyVerifier",
    "VerifierState",
    "Deadline",
    "TransportRetryPolicy",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY",
    # Sources
    "StronglyConsistentSource",
    "EventuallyConsistentSource",
    # Reconciliation
    "EntityReconciler",
    "UNSET_SENTINELS",
    "is_unset",
    "lookup",
    "mirror_key_value",
    "to_mirror_field",
    "values_match",
]
