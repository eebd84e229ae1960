"""Tests for the protobuf composite key composer."""

from __future__ import annotations

import pytest

from tck_core.subspecs.keys import ProtobufKeyComposer, equivalent, strip_key_envelope
from tck_core.subspecs.keys.composer import VarintError, decode_varint, encode_varint
from tck_core.subspecs.keys.encoding import (
    ECDSA_SECP256K1_PUBLIC_DER_PREFIX,
    ED25519_PUBLIC_DER_PREFIX,
)

ED25519_RAW = "11" * 32
SECP256K1_RAW = "03" + "22" * 32
ED25519_DER = ED25519_PUBLIC_DER_PREFIX + ED25519_RAW
SECP256K1_DER = ECDSA_SECP256K1_PUBLIC_DER_PREFIX + SECP256K1_RAW

# Key{ed25519: raw}: tag 0x12, length 32.
ED25519_KEY_MESSAGE = "1220" + ED25519_RAW
# Key{ECDSA_secp256k1: raw}: tag 0x3a, length 33.
SECP256K1_KEY_MESSAGE = "3a21" + SECP256K1_RAW


@pytest.fixture
def composer() -> ProtobufKeyComposer:
    """Provide a composer."""
    return ProtobufKeyComposer()


class TestVarint:
    """Tests for the varint helpers used by the composer."""

    @pytest.mark.parametrize(
        ("value", "encoded"),
        [(0, b"\x00"), (1, b"\x01"), (127, b"\x7f"), (128, b"\x80\x01"), (300, b"\xac\x02")],
    )
    def test_vectors(self, value: int, encoded: bytes) -> None:
        """Encoding and decoding agree with the protobuf reference vectors."""
        assert encode_varint(value) == encoded
        assert decode_varint(encoded) == (value, len(encoded))

    def test_negative(self) -> None:
        """Negative values are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            encode_varint(-1)

    def test_truncated(self) -> None:
        """A dangling continuation bit is an error."""
        with pytest.raises(VarintError, match="Truncated"):
            decode_varint(b"\x80")


class TestComposeList:
    """Byte layout of `Key{keyList}`."""

    def test_single_ed25519_child(self, composer: ProtobufKeyComposer) -> None:
        """A DER child is embedded by its raw bytes."""
        entry = "0a22" + ED25519_KEY_MESSAGE
        assert composer.compose_list([ED25519_DER]) == "3224" + entry

    def test_mixed_children_keep_order(self, composer: ProtobufKeyComposer) -> None:
        """Children appear in declaration order."""
        body = "0a22" + ED25519_KEY_MESSAGE + "0a23" + SECP256K1_KEY_MESSAGE
        assert composer.compose_list([ED25519_DER, SECP256K1_DER]) == "3249" + body

    def test_raw_children(self, composer: ProtobufKeyComposer) -> None:
        """Raw keys compose exactly like their DER forms."""
        assert composer.compose_list([ED25519_RAW, SECP256K1_RAW]) == composer.compose_list(
            [ED25519_DER, SECP256K1_DER]
        )

    def test_nested_composite(self, composer: ProtobufKeyComposer) -> None:
        """Composite children are embedded as already-encoded `Key` messages."""
        inner = composer.compose_list([ED25519_DER])
        outer = composer.compose_list([inner])
        inner_length = len(bytes.fromhex(inner))
        assert outer == f"32{inner_length + 2:02x}0a{inner_length:02x}" + inner

    def test_unembeddable_child(self, composer: ProtobufKeyComposer) -> None:
        """Garbage children are rejected."""
        with pytest.raises(ValueError, match="Cannot embed"):
            composer.compose_list(["deadbeef"])


class TestComposeThreshold:
    """Byte layout of `Key{thresholdKey}`."""

    def test_one_of_one(self, composer: ProtobufKeyComposer) -> None:
        """Threshold is a varint field followed by the key list."""
        key_list = "0a22" + ED25519_KEY_MESSAGE
        body = "0801" + "1224" + key_list
        assert composer.compose_threshold(1, [ED25519_DER]) == "2a28" + body

    def test_threshold_changes_encoding(self, composer: ProtobufKeyComposer) -> None:
        """Same children with different thresholds encode differently."""
        children = [ED25519_DER, SECP256K1_DER]
        assert composer.compose_threshold(1, children) != composer.compose_threshold(2, children)


class TestStripKeyEnvelope:
    """The inner message is what the consensus read path reports."""

    def test_list(self, composer: ProtobufKeyComposer) -> None:
        """Stripping a list yields the bare KeyList."""
        encoding = composer.compose_list([ED25519_DER])
        assert strip_key_envelope(encoding) == "0a22" + ED25519_KEY_MESSAGE

    def test_inner_is_equivalent_suffix(self, composer: ProtobufKeyComposer) -> None:
        """The bare message is a suffix of the full envelope."""
        encoding = composer.compose_threshold(2, [ED25519_DER, SECP256K1_DER, ED25519_DER])
        inner = strip_key_envelope(encoding)
        assert encoding.endswith(inner)
        assert equivalent(encoding, inner)

    def test_not_composite(self) -> None:
        """Single keys have no composite envelope."""
        with pytest.raises(ValueError, match="Not a composite"):
            strip_key_envelope(ED25519_KEY_MESSAGE)

    def test_length_mismatch(self) -> None:
        """A truncated envelope is rejected."""
        with pytest.raises(ValueError, match="does not match"):
            strip_key_envelope("3224" + "0a22")
