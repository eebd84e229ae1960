"""
Generated key topology nodes.

A topology is a tree built bottom-up from a spec and never mutated after
construction. Three node kinds exist:

- SimpleKey: a leaf holding one key's encodings
- KeyList: every child must sign
- ThresholdKey: at least `threshold` children must sign

Children are stored as tuples so the whole tree is immutable and hashable.
Because nodes can only reference nodes that already exist, cycles cannot
be constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .algorithm import KeyAlgorithm


@dataclass(frozen=True, slots=True)
class SimpleKey:
    """A single key."""

    algorithm: KeyAlgorithm
    """Signature algorithm of the key."""

    public_encoding: str
    """DER hex of the public key, or the hex address for EVM address leaves."""

    private_encoding: str | None = None
    """DER hex of the private key. Present only for private-key-bearing leaves."""

    @property
    def encoding(self) -> str:
        """Public encoding sent to the system under test."""
        return self.public_encoding


@dataclass(frozen=True, slots=True)
class KeyList:
    """An ordered list of keys that must all sign."""

    children: tuple[KeyNode, ...]
    """Child nodes in declaration order."""

    encoding: str
    """Composite public encoding of the whole list."""

    def __post_init__(self) -> None:
        """Reject empty lists."""
        if not self.children:
            raise ValueError("KeyList requires at least one child")


@dataclass(frozen=True, slots=True)
class ThresholdKey:
    """An ordered list of keys of which at least `threshold` must sign."""

    threshold: int
    """Minimum number of children that must sign."""

    children: tuple[KeyNode, ...]
    """Child nodes in declaration order."""

    encoding: str
    """Composite public encoding of the threshold key."""

    def __post_init__(self) -> None:
        """Enforce 1 <= threshold <= len(children)."""
        if not self.children:
            raise ValueError("ThresholdKey requires at least one child")
        if not 1 <= self.threshold <= len(self.children):
            raise ValueError(
                f"ThresholdKey threshold {self.threshold} outside [1, {len(self.children)}]"
            )


KeyNode = SimpleKey | KeyList | ThresholdKey
"""Any node of a generated key topology."""


@dataclass(frozen=True, slots=True)
class GeneratedTopology:
    """
    Output of topology generation.

    Created once per scenario step and discarded at scenario end.
    """

    root: KeyNode
    """Root of the generated tree."""

    key: str
    """Public encoding of the root, sent to the system under test."""

    private_keys: tuple[str, ...]
    """Flattened signer set, pre-order depth-first."""

    def to_json(self) -> dict[str, Any]:
        """Render in the shape returned by the system under test's key generator."""
        result: dict[str, Any] = {"key": self.key}
        if isinstance(self.root, (KeyList, ThresholdKey)):
            result["privateKeys"] = list(self.private_keys)
        return result
