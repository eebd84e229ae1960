"""Signature algorithms and the key type vocabulary used by topology specs."""

from __future__ import annotations

from enum import Enum


class KeyAlgorithm(Enum):
    """Signature algorithms a single key may use."""

    ED25519 = "ED25519"
    """Edwards-curve signatures over Curve25519. 32-byte raw public key."""

    ECDSA_SECP256K1 = "ECDSA_SECP256K1"
    """ECDSA over secp256k1. 33-byte compressed raw public key."""


class KeyType(Enum):
    """
    Node types recognized in a key topology spec.

    The values are the exact strings the system under test accepts in the
    `type` field of its key-generation request.
    """

    ED25519_PUBLIC_KEY = "ed25519PublicKey"
    ED25519_PRIVATE_KEY = "ed25519PrivateKey"
    ECDSA_SECP256K1_PUBLIC_KEY = "ecdsaSecp256k1PublicKey"
    ECDSA_SECP256K1_PRIVATE_KEY = "ecdsaSecp256k1PrivateKey"
    EVM_ADDRESS = "evmAddress"
    KEY_LIST = "keyList"
    THRESHOLD_KEY = "thresholdKey"

    @property
    def is_composite(self) -> bool:
        """True for types that aggregate child keys."""
        return self in (KeyType.KEY_LIST, KeyType.THRESHOLD_KEY)

    @property
    def bears_private_key(self) -> bool:
        """True for leaf types whose generated node keeps its private half."""
        return self.value.endswith("PrivateKey")

    @property
    def algorithm(self) -> KeyAlgorithm | None:
        """
        Signature algorithm of a leaf type.

        EVM addresses are always derived from secp256k1 keys.
        Composite types have no single algorithm and return None.
        """
        if self in (KeyType.ED25519_PUBLIC_KEY, KeyType.ED25519_PRIVATE_KEY):
            return KeyAlgorithm.ED25519
        if self in (
            KeyType.ECDSA_SECP256K1_PUBLIC_KEY,
            KeyType.ECDSA_SECP256K1_PRIVATE_KEY,
            KeyType.EVM_ADDRESS,
        ):
            return KeyAlgorithm.ECDSA_SECP256K1
        return None

    def public_counterpart(self) -> KeyType:
        """The public-only type of a private leaf type. Identity otherwise."""
        if self is KeyType.ED25519_PRIVATE_KEY:
            return KeyType.ED25519_PUBLIC_KEY
        if self is KeyType.ECDSA_SECP256K1_PRIVATE_KEY:
            return KeyType.ECDSA_SECP256K1_PUBLIC_KEY
        return self

    @classmethod
    def private_for(cls, algorithm: KeyAlgorithm) -> KeyType:
        """The private leaf type for an algorithm."""
        if algorithm is KeyAlgorithm.ED25519:
            return cls.ED25519_PRIVATE_KEY
        return cls.ECDSA_SECP256K1_PRIVATE_KEY
