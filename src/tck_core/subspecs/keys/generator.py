"""
Key topology generation.

Turns a `KeyTopologySpec` into a `GeneratedTopology` by depth-first,
pre-order descent:

1. The whole spec is validated first. An invalid spec raises
   `GenerationError` before any key primitive is called.
2. Leaves ask the key generator for material: a fresh pair, a public key
   derived from `fromKey`, or an EVM address.
3. Composites generate their children in declaration order, then ask the
   composer for the aggregate encoding.
4. The signer set is the flattening of the finished tree.
"""

from __future__ import annotations

import logging
from typing import Any

from .algorithm import KeyAlgorithm, KeyType
from .composer import ProtobufKeyComposer
from .flatten import flatten
from .local import LocalKeyGenerator
from .nodes import GeneratedTopology, KeyList, KeyNode, SimpleKey, ThresholdKey
from .primitives import KeyComposer, KeyGenerator
from .topology import KeyTopologySpec

logger = logging.getLogger(__name__)


class TopologyGenerator:
    """
    Builds key topologies from specs using pluggable primitives.

    Defaults to in-process primitives, which is what unit tests and the CLI
    want. Conformance scenarios typically pass an `RpcKeyGenerator` so the
    system under test produces the key material itself.
    """

    def __init__(
        self,
        generator: KeyGenerator | None = None,
        composer: KeyComposer | None = None,
    ) -> None:
        self.generator: KeyGenerator = generator or LocalKeyGenerator()
        self.composer: KeyComposer = composer or ProtobufKeyComposer()

    async def generate(self, spec: KeyTopologySpec | dict[str, Any]) -> GeneratedTopology:
        """
        Generate a topology.

        Args:
            spec: A spec model, or plain JSON-like data describing one.

        Returns:
            The generated tree, its root public encoding and its signer set.

        Raises:
            GenerationError: If the spec is invalid. Raised before any
                primitive is invoked.
        """
        if isinstance(spec, KeyTopologySpec):
            spec.ensure_valid()
        else:
            spec = KeyTopologySpec.parse(spec)

        root = await self._generate_node(spec)
        topology = GeneratedTopology(
            root=root,
            key=_node_encoding(root),
            private_keys=tuple(flatten(root)),
        )
        logger.debug(
            "Generated %s topology with %d signer(s)", spec.type, len(topology.private_keys)
        )
        return topology

    async def _generate_node(self, spec: KeyTopologySpec) -> KeyNode:
        key_type = spec.key_type

        if key_type is KeyType.EVM_ADDRESS:
            return await self._generate_evm_address(spec)

        if not key_type.is_composite:
            return await self._generate_simple(spec, key_type)

        # Validation guarantees composites have children.
        assert spec.keys is not None
        children: list[KeyNode] = []
        for child_spec in spec.keys:
            children.append(await self._generate_node(child_spec))
        encodings = [_node_encoding(child) for child in children]

        if key_type is KeyType.THRESHOLD_KEY:
            assert spec.threshold is not None
            return ThresholdKey(
                threshold=spec.threshold,
                children=tuple(children),
                encoding=self.composer.compose_threshold(spec.threshold, encodings),
            )
        return KeyList(
            children=tuple(children),
            encoding=self.composer.compose_list(encodings),
        )

    async def _generate_simple(self, spec: KeyTopologySpec, key_type: KeyType) -> SimpleKey:
        algorithm = key_type.algorithm
        assert algorithm is not None

        if spec.from_key is not None:
            # Reuse the caller's private key; only its public half is new to us.
            public_encoding = await self.generator.derive_public(spec.from_key)
            private_encoding: str | None = spec.from_key
        else:
            pair = await self.generator.generate(algorithm)
            public_encoding, private_encoding = pair.public_encoding, pair.private_encoding

        return SimpleKey(
            algorithm=algorithm,
            public_encoding=public_encoding,
            private_encoding=private_encoding if key_type.bears_private_key else None,
        )

    async def _generate_evm_address(self, spec: KeyTopologySpec) -> SimpleKey:
        private_encoding = spec.from_key
        if private_encoding is None:
            pair = await self.generator.generate(KeyAlgorithm.ECDSA_SECP256K1)
            private_encoding = pair.private_encoding

        address = await self.generator.derive_evm_address(private_encoding)
        return SimpleKey(algorithm=KeyAlgorithm.ECDSA_SECP256K1, public_encoding=address)


def _node_encoding(node: KeyNode) -> str:
    match node:
        case SimpleKey(public_encoding=encoding):
            return encoding
        case KeyList(encoding=encoding) | ThresholdKey(encoding=encoding):
            return encoding
    raise TypeError(f"Unknown key node: {node!r}")


async def generate_topology(
    spec: KeyTopologySpec | dict[str, Any],
    generator: KeyGenerator | None = None,
    composer: KeyComposer | None = None,
) -> GeneratedTopology:
    """Generate a topology with one-off primitives. See `TopologyGenerator.generate`."""
    return await TopologyGenerator(generator, composer).generate(spec)
