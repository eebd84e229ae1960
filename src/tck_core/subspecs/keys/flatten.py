"""
Signer set flattening.

Turns a generated topology into the ordered list of private keys that must
sign a transaction touching it.

Ordering rule: pre-order, depth-first, left-to-right over children.
A leaf contributes its private encoding if it has one and nothing otherwise.
Public-only leaves are legal: some other key on that branch supplies the proof.

The walk is deterministic. Identical trees always produce identical lists,
which lets tests pre-compute signer counts, e.g. a list of two 4-key
sub-lists flattens to the concatenation of each sub-list's own flattening.
"""

from __future__ import annotations

from collections.abc import Iterable

from .nodes import KeyList, KeyNode, SimpleKey, ThresholdKey


def flatten(root: KeyNode) -> list[str]:
    """
    Collect every private key in the tree, in signing order.

    Uses an explicit stack so deep trees are not bounded by the interpreter's
    recursion limit.

    Args:
        root: Root of a generated topology.

    Returns:
        Private key encodings, pre-order depth-first.
    """
    signers: list[str] = []
    stack: list[KeyNode] = [root]

    while stack:
        node = stack.pop()
        match node:
            case SimpleKey(private_encoding=private_encoding):
                if private_encoding is not None:
                    signers.append(private_encoding)
            case KeyList(children=children) | ThresholdKey(children=children):
                # Push in reverse so the leftmost child is popped first.
                stack.extend(reversed(children))

    return signers


def signer_count(root: KeyNode) -> int:
    """Number of signatures the topology contributes."""
    return len(flatten(root))


def compose_signers(*groups: Iterable[str]) -> list[str]:
    """
    Merge signer groups into one list.

    Callers combine topology signers with keys supplied separately, such as
    the account's current key or a payer key. Order is preserved and repeated
    keys are kept only at their first position.

    Args:
        groups: Signer groups in the order they should be applied.

    Returns:
        Combined signer list without duplicates.
    """
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for signer in group:
            if signer not in seen:
                seen.add(signer)
                merged.append(signer)
    return merged
