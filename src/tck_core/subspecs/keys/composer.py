"""
Protobuf encoding of composite keys.

The system under test describes keys with three protobuf messages:

    message Key {
        oneof key {
            bytes ed25519 = 2;
            ThresholdKey thresholdKey = 5;
            KeyList keyList = 6;
            bytes ECDSA_secp256k1 = 7;
        }
    }
    message KeyList { repeated Key keys = 1; }
    message ThresholdKey { uint32 threshold = 1; KeyList keys = 2; }

A composite encoding is the hex of a `Key` message. Single-key children
arrive as DER hex and are embedded by their raw key bytes; composite children
arrive as `Key` hex and are embedded as-is.

Only the subset needed to build composites is implemented: every field is
either a varint or length-delimited, and fields are written in field-number
order with minimal varints, which is what canonical protobuf serializers emit.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Sequence

from .algorithm import KeyAlgorithm
from .encoding import detect_algorithm, is_der_envelope, raw_suffix


class VarintError(Exception):
    """Raised when varint decoding fails."""


def encode_varint(value: int) -> bytes:
    """
    Encode an unsigned integer as LEB128 varint.

    Splits the integer into 7-bit groups, low group first. Every byte except
    the last has the continuation bit (0x80) set.

    Raises:
        ValueError: If value is negative.
    """
    if value < 0:
        raise ValueError("Varint must be non-negative")

    result = bytearray()
    while value >= 0x80:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a varint from bytes at the given offset.

    Returns:
        Tuple of (decoded_value, bytes_consumed).

    Raises:
        VarintError: If the input is truncated or longer than 10 bytes.
    """
    result = 0
    shift = 0
    pos = offset

    while True:
        if pos >= len(data):
            raise VarintError("Truncated varint")

        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7

        if not (byte & 0x80):
            break

        # A 64-bit value needs at most 10 bytes.
        if shift >= 70:
            raise VarintError("Varint too long")

    return result, pos - offset


class _KeyTag(IntEnum):
    """
    Protobuf field tags for the `Key` message.

    Tag format: (field_number << 3) | wire_type
        - wire_type 0 = varint
        - wire_type 2 = length-delimited (bytes, embedded messages)
    """

    ED25519 = 0x12  # (2 << 3) | 2
    THRESHOLD_KEY = 0x2A  # (5 << 3) | 2
    KEY_LIST = 0x32  # (6 << 3) | 2
    ECDSA_SECP256K1 = 0x3A  # (7 << 3) | 2


class _KeyListTag(IntEnum):
    """Protobuf field tags for the `KeyList` message."""

    KEYS = 0x0A  # (1 << 3) | 2


class _ThresholdKeyTag(IntEnum):
    """Protobuf field tags for the `ThresholdKey` message."""

    THRESHOLD = 0x08  # (1 << 3) | 0
    KEYS = 0x12  # (2 << 3) | 2


_COMPOSITE_TAGS = (_KeyTag.KEY_LIST, _KeyTag.THRESHOLD_KEY)

_SINGLE_KEY_TAGS = {
    KeyAlgorithm.ED25519: _KeyTag.ED25519,
    KeyAlgorithm.ECDSA_SECP256K1: _KeyTag.ECDSA_SECP256K1,
}


def _length_delimited(tag: int, payload: bytes) -> bytes:
    return bytes([tag]) + encode_varint(len(payload)) + payload


def _child_key_message(child: str) -> bytes:
    """
    Turn one child public encoding into a serialized `Key` message.

    Raises:
        ValueError: If the child is neither a single key nor a composite key.
    """
    if is_der_envelope(child):
        algorithm = detect_algorithm(child)
        assert algorithm is not None
        raw = bytes.fromhex(raw_suffix(child, algorithm))
        return _length_delimited(_SINGLE_KEY_TAGS[algorithm], raw)

    data = bytes.fromhex(child)

    # Raw keys are 32 or 33 bytes. The smallest composite is longer than that.
    algorithm = detect_algorithm(child)
    if algorithm is not None:
        return _length_delimited(_SINGLE_KEY_TAGS[algorithm], data)

    if data and data[0] in _COMPOSITE_TAGS:
        return data
    raise ValueError(f"Cannot embed child key encoding: {child[:32]}...")


def _key_list_message(children: Sequence[str]) -> bytes:
    return b"".join(
        _length_delimited(_KeyListTag.KEYS, _child_key_message(child)) for child in children
    )


def strip_key_envelope(encoding: str) -> str:
    """
    Remove the outer `Key` tag and length from a composite encoding.

    The result is the bare `KeyList` or `ThresholdKey` message, which is how
    the strongly-consistent read path reports composite keys. It is always a
    suffix of the input.

    Raises:
        ValueError: If the input is not a composite `Key` message.
    """
    data = bytes.fromhex(encoding)
    if not data or data[0] not in _COMPOSITE_TAGS:
        raise ValueError("Not a composite key encoding")

    length, consumed = decode_varint(data, 1)
    body = data[1 + consumed :]
    if len(body) != length:
        raise ValueError(f"Composite key length {length} does not match payload {len(body)}")
    return body.hex()


class ProtobufKeyComposer:
    """KeyComposer emitting hex-encoded protobuf `Key` messages."""

    def compose_list(self, children: Sequence[str]) -> str:
        """Encode `Key{keyList: KeyList{keys: children}}`."""
        return _length_delimited(_KeyTag.KEY_LIST, _key_list_message(children)).hex()

    def compose_threshold(self, threshold: int, children: Sequence[str]) -> str:
        """Encode `Key{thresholdKey: ThresholdKey{threshold, keys: KeyList{keys: children}}}`."""
        body = (
            bytes([_ThresholdKeyTag.THRESHOLD])
            + encode_varint(threshold)
            + _length_delimited(_ThresholdKeyTag.KEYS, _key_list_message(children))
        )
        return _length_delimited(_KeyTag.THRESHOLD_KEY, body).hex()
