"""Tests for key encoding normalization."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tck_core.subspecs.keys import (
    KeyAlgorithm,
    assert_equivalent,
    assert_same_raw_key,
    detect_algorithm,
    equivalent,
    is_der_envelope,
    raw_suffix,
)
from tck_core.subspecs.keys.encoding import (
    ECDSA_SECP256K1_PRIVATE_DER_PREFIX,
    ECDSA_SECP256K1_PUBLIC_DER_PREFIX,
    ED25519_PRIVATE_DER_PREFIX,
    ED25519_PUBLIC_DER_PREFIX,
    is_private_envelope,
)
from tck_core.types import EncodingMismatch

ED25519_RAW = "11" * 32
SECP256K1_RAW = "02" + "22" * 32

hex_strings = st.text(alphabet="0123456789abcdefABCDEF", max_size=80)


class TestPrefixes:
    """DER headers have the lengths their ASN.1 structure dictates."""

    @pytest.mark.parametrize(
        ("prefix", "byte_length"),
        [
            (ED25519_PUBLIC_DER_PREFIX, 12),
            (ED25519_PRIVATE_DER_PREFIX, 16),
            (ECDSA_SECP256K1_PUBLIC_DER_PREFIX, 14),
            (ECDSA_SECP256K1_PRIVATE_DER_PREFIX, 18),
        ],
    )
    def test_prefix_length(self, prefix: str, byte_length: int) -> None:
        """Each prefix is a fixed number of bytes."""
        assert len(bytes.fromhex(prefix)) == byte_length


class TestRawSuffix:
    """Tests for stripping DER envelopes."""

    def test_ed25519_public(self) -> None:
        """The ED25519 public header is removed."""
        assert raw_suffix(ED25519_PUBLIC_DER_PREFIX + ED25519_RAW, KeyAlgorithm.ED25519) == (
            ED25519_RAW
        )

    def test_secp256k1_public(self) -> None:
        """The secp256k1 public header is removed."""
        encoded = ECDSA_SECP256K1_PUBLIC_DER_PREFIX + SECP256K1_RAW
        assert raw_suffix(encoded, KeyAlgorithm.ECDSA_SECP256K1) == SECP256K1_RAW

    def test_private_envelope(self) -> None:
        """Private headers are recognized too."""
        encoded = ED25519_PRIVATE_DER_PREFIX + "33" * 32
        assert raw_suffix(encoded, KeyAlgorithm.ED25519) == "33" * 32

    def test_raw_passthrough(self) -> None:
        """Input without a known header is returned as-is."""
        assert raw_suffix(ED25519_RAW, KeyAlgorithm.ED25519) == ED25519_RAW

    def test_case_and_0x_prefix(self) -> None:
        """Hex case and a 0x prefix do not matter."""
        encoded = "0x" + (ED25519_PUBLIC_DER_PREFIX + "ab" * 32).upper()
        assert raw_suffix(encoded, KeyAlgorithm.ED25519) == "ab" * 32

    def test_wrong_algorithm_is_not_stripped(self) -> None:
        """Only the requested algorithm's header is stripped."""
        encoded = ED25519_PUBLIC_DER_PREFIX + ED25519_RAW
        assert raw_suffix(encoded, KeyAlgorithm.ECDSA_SECP256K1) == encoded


class TestDetectAlgorithm:
    """Tests for algorithm detection."""

    @pytest.mark.parametrize(
        ("encoded", "expected"),
        [
            (ED25519_PUBLIC_DER_PREFIX + ED25519_RAW, KeyAlgorithm.ED25519),
            (ED25519_PRIVATE_DER_PREFIX + ED25519_RAW, KeyAlgorithm.ED25519),
            (ECDSA_SECP256K1_PUBLIC_DER_PREFIX + SECP256K1_RAW, KeyAlgorithm.ECDSA_SECP256K1),
            (ECDSA_SECP256K1_PRIVATE_DER_PREFIX + "44" * 32, KeyAlgorithm.ECDSA_SECP256K1),
            (ED25519_RAW, KeyAlgorithm.ED25519),
            (SECP256K1_RAW, KeyAlgorithm.ECDSA_SECP256K1),
            ("03" + "55" * 32, KeyAlgorithm.ECDSA_SECP256K1),
        ],
    )
    def test_detected(self, encoded: str, expected: KeyAlgorithm) -> None:
        """Known envelopes and raw lengths are classified."""
        assert detect_algorithm(encoded) is expected

    @pytest.mark.parametrize("encoded", ["", "32050a03", "04" + "55" * 32, "aa" * 40])
    def test_unrecognized(self, encoded: str) -> None:
        """Anything else is not a single key."""
        assert detect_algorithm(encoded) is None

    def test_envelope_predicates(self) -> None:
        """DER and private-envelope checks."""
        assert is_der_envelope(ECDSA_SECP256K1_PUBLIC_DER_PREFIX + SECP256K1_RAW)
        assert not is_der_envelope(SECP256K1_RAW)
        assert is_private_envelope(ED25519_PRIVATE_DER_PREFIX + ED25519_RAW)
        assert not is_private_envelope(ED25519_PUBLIC_DER_PREFIX + ED25519_RAW)


class TestEquivalent:
    """Tests for suffix equivalence of composite encodings."""

    def test_full_envelope_matches_inner_message(self) -> None:
        """A bare inner message matches the full envelope ending in it."""
        inner = "0a2212" + "20" + "ab" * 32
        full = "3226" + inner
        assert equivalent(full, inner)

    def test_case_insensitive(self) -> None:
        """Hex case is ignored."""
        assert equivalent("32ABCDEF", "abcdef")

    def test_differing_suffix(self) -> None:
        """Encodings ending differently do not match."""
        assert not equivalent("3226aabb", "aabc")

    def test_empty_matches_anything(self) -> None:
        """An empty common suffix is trivially equal."""
        assert equivalent("", "deadbeef")

    @given(a=hex_strings, b=hex_strings)
    def test_symmetric(self, a: str, b: str) -> None:
        """equivalent(a, b) == equivalent(b, a)."""
        assert equivalent(a, b) == equivalent(b, a)

    @given(x=hex_strings)
    def test_reflexive(self, x: str) -> None:
        """Every encoding is equivalent to itself."""
        assert equivalent(x, x)

    @given(prefix=hex_strings, suffix=hex_strings)
    def test_suffix_always_matches(self, prefix: str, suffix: str) -> None:
        """A string is equivalent to any string it is a suffix of."""
        assert equivalent(prefix + suffix, suffix)


class TestAssertions:
    """Tests for the raising wrappers."""

    def test_assert_equivalent_passes(self) -> None:
        """Matching suffixes pass silently."""
        assert_equivalent("3226aabb", "AABB")

    @pytest.mark.parametrize(("expected", "actual"), [("aabb", None), ("aabb", ""), ("", "aabb")])
    def test_assert_equivalent_rejects_missing(self, expected: str, actual: str | None) -> None:
        """An absent value never passes for a set one."""
        with pytest.raises(EncodingMismatch):
            assert_equivalent(expected, actual)

    def test_assert_equivalent_reports_values(self) -> None:
        """The mismatch carries both encodings and the label."""
        with pytest.raises(EncodingMismatch) as exc_info:
            assert_equivalent("aabb", "ccdd", label="consensus adminKey")
        assert exc_info.value.expected == "aabb"
        assert exc_info.value.actual == "ccdd"
        assert exc_info.value.label == "consensus adminKey"

    def test_assert_same_raw_key_across_envelopes(self) -> None:
        """DER and raw forms of the same key match."""
        assert_same_raw_key(
            ED25519_PUBLIC_DER_PREFIX + ED25519_RAW, ED25519_RAW, KeyAlgorithm.ED25519
        )

    def test_assert_same_raw_key_mismatch(self) -> None:
        """Different raw keys fail."""
        with pytest.raises(EncodingMismatch):
            assert_same_raw_key(
                ED25519_PUBLIC_DER_PREFIX + ED25519_RAW, "12" * 32, KeyAlgorithm.ED25519
            )
