"""Key primitives served by the system under test's `generateKey` method."""

from __future__ import annotations

import logging

from tck_core.subspecs.keys import KeyAlgorithm, KeyPairEncoding, KeyType, detect_algorithm
from tck_core.types import TransportError

from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)

GENERATE_KEY_METHOD = "generateKey"


class RpcKeyGenerator:
    """
    Asks the system under test to generate and derive single keys.

    Satisfies `KeyGenerator`, so a `TopologyGenerator` built with it produces
    topologies whose leaves came from the implementation being tested.
    """

    def __init__(self, rpc: JsonRpcClient) -> None:
        self.rpc = rpc

    async def _generate_key(self, key_type: KeyType, from_key: str | None = None) -> str:
        params: dict[str, str] = {"type": key_type.value}
        if from_key is not None:
            params["fromKey"] = from_key

        result = await self.rpc.request(GENERATE_KEY_METHOD, params)
        key = result.get("key") if isinstance(result, dict) else None
        if not isinstance(key, str) or not key:
            raise TransportError(
                f"{GENERATE_KEY_METHOD} returned no key for {key_type.value}", url=self.rpc.url
            )
        logger.debug("Remote %s key generated", key_type.value)
        return key

    async def generate(self, algorithm: KeyAlgorithm) -> KeyPairEncoding:
        """Generate a private key remotely, then derive its public half remotely."""
        private_type = KeyType.private_for(algorithm)
        private_encoding = await self._generate_key(private_type)
        public_encoding = await self._generate_key(
            private_type.public_counterpart(), from_key=private_encoding
        )
        return KeyPairEncoding(public_encoding=public_encoding, private_encoding=private_encoding)

    async def derive_public(self, private_encoding: str) -> str:
        """Derive the public encoding of a private key of either algorithm."""
        # Raw 32-byte private keys are ambiguous; the server reads them as ED25519.
        algorithm = detect_algorithm(private_encoding) or KeyAlgorithm.ED25519
        public_type = KeyType.private_for(algorithm).public_counterpart()
        return await self._generate_key(public_type, from_key=private_encoding)

    async def derive_evm_address(self, private_encoding: str) -> str:
        """Derive the EVM address of a secp256k1 private key."""
        return await self._generate_key(KeyType.EVM_ADDRESS, from_key=private_encoding)
