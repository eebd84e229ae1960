"""
Key primitive interfaces.

Topology generation never touches key material directly. It calls two
collaborators:

- KeyGenerator: produces and derives single keys
- KeyComposer: aggregates child public encodings into a composite encoding

Both are structural protocols. Local implementations live in `local.py`
and `composer.py`; a JSON-RPC backed generator lives with the clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .algorithm import KeyAlgorithm


@dataclass(frozen=True, slots=True)
class KeyPairEncoding:
    """Encodings of a freshly generated key pair."""

    public_encoding: str
    """DER hex of the public key."""

    private_encoding: str
    """DER hex of the private key."""


class KeyGenerator(Protocol):
    """
    Protocol for single-key generation and derivation.

    Methods are async since conformance runs usually ask the system under
    test itself to generate keys.
    """

    async def generate(self, algorithm: KeyAlgorithm) -> KeyPairEncoding:
        """Generate a fresh key pair."""
        ...

    async def derive_public(self, private_encoding: str) -> str:
        """Derive the public encoding of an existing private key."""
        ...

    async def derive_evm_address(self, private_encoding: str) -> str:
        """Derive the 20-byte EVM address (hex) of a secp256k1 private key."""
        ...


class KeyComposer(Protocol):
    """
    Protocol for composite key encoding.

    Implementations decide the bytes. Callers only guarantee that children
    arrive in declaration order and that structural invariants already hold.
    """

    def compose_list(self, children: Sequence[str]) -> str:
        """Encode a key list over the given child public encodings."""
        ...

    def compose_threshold(self, threshold: int, children: Sequence[str]) -> str:
        """Encode a threshold key over the given child public encodings."""
        ...
