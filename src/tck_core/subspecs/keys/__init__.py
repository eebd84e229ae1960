"""
Key topologies.

Builds arbitrary-depth key authorization structures from declarative specs
and derives what a scenario needs from them:

- the composite public encoding to send to the system under test
- the ordered signer set that authorizes a transaction against it
- normalization helpers to compare key encodings across read paths
"""

from .algorithm import KeyAlgorithm, KeyType
from .composer import ProtobufKeyComposer, strip_key_envelope
from .encoding import (
    assert_equivalent,
    assert_same_raw_key,
    detect_algorithm,
    equivalent,
    is_der_envelope,
    raw_suffix,
)
from .fixtures import FOUR_KEYS_KEY_LIST, TWO_LEVELS_NESTED_KEY_LIST, TWO_THRESHOLD_KEY
from .flatten import compose_signers, flatten, signer_count
from .generator import TopologyGenerator, generate_topology
from .local import LocalKeyGenerator
from .nodes import GeneratedTopology, KeyList, KeyNode, SimpleKey, ThresholdKey
from .primitives import KeyComposer, KeyGenerator, KeyPairEncoding
from .topology import MAX_TOPOLOGY_DEPTH, KeyTopologySpec

__all__ = [
    # Vocabulary
    "KeyAlgorithm",
    "KeyType",
    # Specs and nodes
    "KeyTopologySpec",
    "MAX_TOPOLOGY_DEPTH",
    "KeyNode",
    "SimpleKey",
    "KeyList",
    "ThresholdKey",
    "GeneratedTopology",
    # Generation
    "TopologyGenerator",
    "generate_topology",
    "KeyGenerator",
    "KeyComposer",
    "KeyPairEncoding",
    "LocalKeyGenerator",
    "ProtobufKeyComposer",
    "strip_key_envelope",
    # Flattening
    "flatten",
    "signer_count",
    "compose_signers",
    # Normalization
    "raw_suffix",
    "equivalent",
    "detect_algorithm",
    "is_der_envelope",
    "assert_equivalent",
    "assert_same_raw_key",
    # Fixtures
    "FOUR_KEYS_KEY_LIST",
    "TWO_LEVELS_NESTED_KEY_LIST",
    "TWO_THRESHOLD_KEY",
]
