"""
Key encoding normalization.

The two read paths do not return keys in the same envelope:

- Single keys: one side returns the DER envelope, the other the raw key.
  Both agree once the fixed, algorithm-specific DER prefix is stripped.
- Composite keys: one side returns a full protobuf `Key` message, the other
  the inner `KeyList`/`ThresholdKey` message, or a previously captured
  encoding that only covers part of the envelope. Both agree on a common
  suffix.

Everything here is a pure function over hex strings.
"""

from __future__ import annotations

from typing import Final

from tck_core.types import EncodingMismatch

from .algorithm import KeyAlgorithm

ED25519_PUBLIC_DER_PREFIX: Final = "302a300506032b6570032100"
"""SubjectPublicKeyInfo header for a 32-byte ED25519 public key."""

ED25519_PRIVATE_DER_PREFIX: Final = "302e020100300506032b657004220420"
"""PKCS#8 header for a 32-byte ED25519 private key."""

ECDSA_SECP256K1_PUBLIC_DER_PREFIX: Final = "302d300706052b8104000a032200"
"""SubjectPublicKeyInfo header for a 33-byte compressed secp256k1 public key."""

ECDSA_SECP256K1_PRIVATE_DER_PREFIX: Final = "3030020100300706052b8104000a04220420"
"""PKCS#8 header for a 32-byte secp256k1 private key."""

PUBLIC_DER_PREFIXES: Final[dict[KeyAlgorithm, str]] = {
    KeyAlgorithm.ED25519: ED25519_PUBLIC_DER_PREFIX,
    KeyAlgorithm.ECDSA_SECP256K1: ECDSA_SECP256K1_PUBLIC_DER_PREFIX,
}

PRIVATE_DER_PREFIXES: Final[dict[KeyAlgorithm, str]] = {
    KeyAlgorithm.ED25519: ED25519_PRIVATE_DER_PREFIX,
    KeyAlgorithm.ECDSA_SECP256K1: ECDSA_SECP256K1_PRIVATE_DER_PREFIX,
}

RAW_PUBLIC_KEY_HEX_LENGTHS: Final[dict[KeyAlgorithm, int]] = {
    KeyAlgorithm.ED25519: 64,
    KeyAlgorithm.ECDSA_SECP256K1: 66,
}
"""Raw public key sizes in hex characters (32 and 33 bytes)."""


def _strip_hex_prefix(encoded: str) -> str:
    encoded = encoded.strip().lower()
    return encoded[2:] if encoded.startswith("0x") else encoded


def raw_suffix(encoded: str, algorithm: KeyAlgorithm) -> str:
    """
    Return the raw key hex behind an algorithm-specific DER envelope.

    The public envelope of each algorithm has a constant length, so stripping
    is a fixed-length cut. Private envelopes are recognized too. Input that
    carries no known envelope is assumed to be raw already.

    Args:
        encoded: DER or raw key, hex.
        algorithm: Algorithm whose envelope to strip.

    Returns:
        Lowercase raw key hex.
    """
    encoded = _strip_hex_prefix(encoded)
    for prefix in (PUBLIC_DER_PREFIXES[algorithm], PRIVATE_DER_PREFIXES[algorithm]):
        if encoded.startswith(prefix):
            return encoded[len(prefix) :]
    return encoded


def detect_algorithm(encoded: str) -> KeyAlgorithm | None:
    """
    Identify the algorithm of a single-key encoding from its DER envelope.

    Raw keys are classified by length: 64 hex chars for ED25519, 66 hex chars
    starting with 02/03 for a compressed secp256k1 point.

    Returns:
        The algorithm, or None if the encoding is not a recognizable single key.
    """
    encoded = _strip_hex_prefix(encoded)
    for algorithm in KeyAlgorithm:
        if encoded.startswith(PUBLIC_DER_PREFIXES[algorithm]) or encoded.startswith(
            PRIVATE_DER_PREFIXES[algorithm]
        ):
            return algorithm

    if len(encoded) == RAW_PUBLIC_KEY_HEX_LENGTHS[KeyAlgorithm.ED25519]:
        return KeyAlgorithm.ED25519
    if len(encoded) == RAW_PUBLIC_KEY_HEX_LENGTHS[
        KeyAlgorithm.ECDSA_SECP256K1
    ] and encoded.startswith(("02", "03")):
        return KeyAlgorithm.ECDSA_SECP256K1
    return None


def is_der_envelope(encoded: str) -> bool:
    """True if the encoding starts with one of the known DER headers."""
    encoded = _strip_hex_prefix(encoded)
    prefixes = (*PUBLIC_DER_PREFIXES.values(), *PRIVATE_DER_PREFIXES.values())
    return encoded.startswith(prefixes)


def is_private_envelope(encoded: str) -> bool:
    """True if the encoding starts with a PKCS#8 private key header."""
    return _strip_hex_prefix(encoded).startswith(tuple(PRIVATE_DER_PREFIXES.values()))


def equivalent(a: str, b: str) -> bool:
    """
    Decide whether two composite encodings agree.

    Compares the last `min(len(a), len(b))` characters, ignoring case.
    One side may be a full envelope and the other a shorter inner or captured
    value; they match when the shorter one is a suffix of the longer one.

    The comparison is symmetric and reflexive and never raises.
    """
    a = a.lower()
    b = b.lower()
    common = min(len(a), len(b))
    if common == 0:
        return True
    return a[-common:] == b[-common:]


def assert_equivalent(expected: str | None, actual: str | None, *, label: str = "key") -> None:
    """
    Assert two composite encodings agree on their common suffix.

    An absent or empty value never matches, so a cleared key cannot pass for
    a set one.

    Raises:
        EncodingMismatch: If either side is empty or the suffixes differ.
    """
    if not expected or not actual or not equivalent(expected, actual):
        raise EncodingMismatch(expected, actual, label=label)


def assert_same_raw_key(
    expected: str | None,
    actual: str | None,
    algorithm: KeyAlgorithm,
    *,
    label: str = "key",
) -> None:
    """
    Assert two single-key encodings carry the same raw key.

    Either side may be DER-wrapped or raw.

    Raises:
        EncodingMismatch: If either side is empty or the raw keys differ.
    """
    if not expected or not actual:
        raise EncodingMismatch(expected, actual, label=label)
    if raw_suffix(expected, algorithm) != raw_suffix(actual, algorithm):
        raise EncodingMismatch(expected, actual, label=label)
