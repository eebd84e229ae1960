"""
Canned topology specs shared across conformance scenarios.

Every key-bearing entity (accounts, tokens, topics, contracts, schedules)
is exercised with the same handful of structures, so they are defined once.
"""

from __future__ import annotations

from .topology import KeyTopologySpec

FOUR_KEYS_KEY_LIST = KeyTopologySpec.parse(
    {
        "type": "keyList",
        "keys": [
            {"type": "ed25519PublicKey"},
            {"type": "ed25519PrivateKey"},
            {"type": "ecdsaSecp256k1PrivateKey"},
            {"type": "ecdsaSecp256k1PublicKey"},
        ],
    }
)
"""Flat list mixing both algorithms and both key halves. Two signers."""

TWO_LEVELS_NESTED_KEY_LIST = KeyTopologySpec.parse(
    {
        "type": "keyList",
        "keys": [
            {
                "type": "keyList",
                "keys": [
                    {"type": "ecdsaSecp256k1PublicKey"},
                    {"type": "ecdsaSecp256k1PrivateKey"},
                ],
            },
            {
                "type": "keyList",
                "keys": [
                    {"type": "ecdsaSecp256k1PublicKey"},
                    {"type": "ed25519PublicKey"},
                ],
            },
            {
                "type": "keyList",
                "keys": [
                    {"type": "ed25519PrivateKey"},
                    {"type": "ecdsaSecp256k1PublicKey"},
                ],
            },
        ],
    }
)
"""Three nested two-key lists. Two signers."""

TWO_THRESHOLD_KEY = KeyTopologySpec.parse(
    {
        "type": "thresholdKey",
        "threshold": 2,
        "keys": [
            {"type": "ed25519PrivateKey"},
            {"type": "ecdsaSecp256k1PublicKey"},
            {"type": "ed25519PublicKey"},
        ],
    }
)
"""2-of-3 threshold key. One signer."""
