"""
In-process key primitives.

Generates ED25519 and secp256k1 key pairs with `cryptography` and emits the
DER hex encodings the system under test expects. EVM addresses use keccak-256
from `pycryptodome`.

Used by unit tests, by the CLI, and by any scenario that wants key material
without a round-trip to the system under test.
"""

from __future__ import annotations

import logging

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from tck_core.types import GenerationError

from .algorithm import KeyAlgorithm
from .encoding import (
    PRIVATE_DER_PREFIXES,
    PUBLIC_DER_PREFIXES,
    detect_algorithm,
    is_private_envelope,
    raw_suffix,
)
from .primitives import KeyPairEncoding

logger = logging.getLogger(__name__)


def _ed25519_encodings(private_key: Ed25519PrivateKey) -> KeyPairEncoding:
    private_raw = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_raw = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return KeyPairEncoding(
        public_encoding=PUBLIC_DER_PREFIXES[KeyAlgorithm.ED25519] + public_raw.hex(),
        private_encoding=PRIVATE_DER_PREFIXES[KeyAlgorithm.ED25519] + private_raw.hex(),
    )


def _secp256k1_encodings(private_key: ec.EllipticCurvePrivateKey) -> KeyPairEncoding:
    private_raw = private_key.private_numbers().private_value.to_bytes(32, "big")

    # Compressed point: 0x02/0x03 parity byte followed by the 32-byte x coordinate.
    public_raw = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    )
    return KeyPairEncoding(
        public_encoding=PUBLIC_DER_PREFIXES[KeyAlgorithm.ECDSA_SECP256K1] + public_raw.hex(),
        private_encoding=PRIVATE_DER_PREFIXES[KeyAlgorithm.ECDSA_SECP256K1] + private_raw.hex(),
    )


def _load_private_key(private_encoding: str) -> tuple[KeyAlgorithm, bytes]:
    """
    Split a DER private key encoding into its algorithm and raw scalar.

    Raises:
        GenerationError: If the encoding is not a recognized private key.
    """
    algorithm = detect_algorithm(private_encoding)
    if algorithm is None or not is_private_envelope(private_encoding):
        raise GenerationError(f"fromKey is not a DER private key: {private_encoding[:24]}...")

    raw = bytes.fromhex(raw_suffix(private_encoding, algorithm))
    if len(raw) != 32:
        raise GenerationError(f"{algorithm.value} private key must be 32 bytes, got {len(raw)}")
    return algorithm, raw


def _secp256k1_from_raw(raw: bytes) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())


def keccak256(data: bytes) -> bytes:
    """Compute the Ethereum keccak-256 digest."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


class LocalKeyGenerator:
    """KeyGenerator backed by local cryptography."""

    async def generate(self, algorithm: KeyAlgorithm) -> KeyPairEncoding:
        """Generate a fresh key pair of the given algorithm."""
        if algorithm is KeyAlgorithm.ED25519:
            pair = _ed25519_encodings(Ed25519PrivateKey.generate())
        else:
            pair = _secp256k1_encodings(ec.generate_private_key(ec.SECP256K1()))
        logger.debug("Generated %s key %s", algorithm.value, pair.public_encoding)
        return pair

    async def derive_public(self, private_encoding: str) -> str:
        """Derive the DER public encoding of a DER private key."""
        algorithm, raw = _load_private_key(private_encoding)
        if algorithm is KeyAlgorithm.ED25519:
            pair = _ed25519_encodings(Ed25519PrivateKey.from_private_bytes(raw))
        else:
            pair = _secp256k1_encodings(_secp256k1_from_raw(raw))
        return pair.public_encoding

    async def derive_evm_address(self, private_encoding: str) -> str:
        """
        Derive the EVM address of a secp256k1 private key.

        address = keccak256(uncompressed_pubkey[1:])[12:]

        Raises:
            GenerationError: If the key is not a secp256k1 key.
        """
        algorithm, raw = _load_private_key(private_encoding)
        if algorithm is not KeyAlgorithm.ECDSA_SECP256K1:
            raise GenerationError("EVM addresses can only be derived from secp256k1 keys")

        uncompressed = (
            _secp256k1_from_raw(raw)
            .public_key()
            .public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.UncompressedPoint,
            )
        )
        # Hash the 64-byte x||y, excluding the 0x04 prefix byte.
        return keccak256(uncompressed[1:])[-20:].hex()
