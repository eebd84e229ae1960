"""Declarative key topology specs and their structural validation."""

from __future__ import annotations

from typing import Any, Final

from pydantic import ValidationError

from tck_core.types import CamelModel, GenerationError

from .algorithm import KeyType
from .encoding import detect_algorithm, is_der_envelope

MAX_TOPOLOGY_DEPTH: Final[int] = 16
"""
Hard ceiling on spec nesting depth.

Real scenarios nest at most three levels. The ceiling only exists so a
malformed fixture cannot drive validation or generation into unbounded
recursion.
"""


class KeyTopologySpec(CamelModel):
    """
    Declarative description of a key topology.

    Mirrors the JSON accepted by the system under test's key-generation
    method, so a fixture can be written once and used both locally and over
    JSON-RPC:

    ```python
    KeyTopologySpec.parse({
        "type": "thresholdKey",
        "threshold": 2,
        "keys": [{"type": "ed25519PrivateKey"}, {"type": "ecdsaSecp256k1PublicKey"}],
    })
    ```

    Construction accepts any `type` string. Semantic checks live in
    `ensure_valid()`, which callers must run before touching a key primitive.
    """

    type: str
    """Node type. Must be one of the `KeyType` values."""

    from_key: str | None = None
    """Existing private key encoding to derive this leaf from, instead of generating one."""

    threshold: int | None = None
    """Required signer count. Only valid, and required, for `thresholdKey`."""

    keys: list[KeyTopologySpec] | None = None
    """Child specs in order. Only valid, and required, for `keyList` and `thresholdKey`."""

    @classmethod
    def parse(cls, data: dict[str, Any]) -> KeyTopologySpec:
        """
        Build and validate a spec from plain JSON-like data.

        Raises:
            GenerationError: If the data does not describe a valid topology.
        """
        try:
            spec = cls.model_validate(data)
        except ValidationError as exc:
            raise GenerationError(f"malformed spec: {exc.errors()[0]['msg']}") from exc
        spec.ensure_valid()
        return spec

    @property
    def key_type(self) -> KeyType:
        """
        The node type as an enum member.

        Raises:
            GenerationError: If `type` is not a recognized variant.
        """
        try:
            return KeyType(self.type)
        except ValueError:
            raise GenerationError(f"unrecognized key type {self.type!r}") from None

    def ensure_valid(self) -> None:
        """
        Check the whole tree without performing any I/O.

        Raises:
            GenerationError: On the first invalid node, with its path.
        """
        self._validate_node(path="", depth=1, inside_composite=False)

    def to_json(self) -> dict[str, Any]:
        """Render as the camelCase JSON the system under test accepts."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def count_private_leaves(self) -> int:
        """Number of leaves whose generated node will carry a private key."""
        if self.keys is None:
            return 1 if self.key_type.bears_private_key else 0
        return sum(child.count_private_leaves() for child in self.keys)

    def depth(self) -> int:
        """Nesting depth. A single leaf has depth 1."""
        if not self.keys:
            return 1
        return 1 + max(child.depth() for child in self.keys)

    def _validate_node(self, *, path: str, depth: int, inside_composite: bool) -> None:
        if depth > MAX_TOPOLOGY_DEPTH:
            raise GenerationError(
                f"nesting deeper than {MAX_TOPOLOGY_DEPTH} levels", path=path
            )

        try:
            key_type = self.key_type
        except GenerationError as exc:
            raise GenerationError(exc.detail, path=path) from None

        if not key_type.is_composite:
            if self.keys is not None:
                raise GenerationError(f"{key_type.value} cannot have child keys", path=path)
            if self.threshold is not None:
                raise GenerationError(f"{key_type.value} cannot have a threshold", path=path)
            # An address is not key material and cannot be aggregated.
            if key_type is KeyType.EVM_ADDRESS and inside_composite:
                raise GenerationError("evmAddress cannot be nested in a composite key", path=path)
            # Raw keys are ambiguous, so only a DER envelope pins the algorithm.
            if self.from_key is not None and is_der_envelope(self.from_key):
                from_algorithm = detect_algorithm(self.from_key)
                if from_algorithm is not None and from_algorithm is not key_type.algorithm:
                    raise GenerationError(
                        f"{key_type.value} cannot be derived from a {from_algorithm.value} key",
                        path=path,
                    )
            return

        if self.from_key is not None:
            raise GenerationError(f"{key_type.value} cannot be derived from a key", path=path)
        if not self.keys:
            raise GenerationError(f"{key_type.value} requires at least one child key", path=path)

        if key_type is KeyType.THRESHOLD_KEY:
            if self.threshold is None:
                raise GenerationError("thresholdKey requires a threshold", path=path)
            if not 1 <= self.threshold <= len(self.keys):
                raise GenerationError(
                    f"threshold {self.threshold} outside [1, {len(self.keys)}]", path=path
                )
        elif self.threshold is not None:
            raise GenerationError("keyList cannot have a threshold", path=path)

        for index, child in enumerate(self.keys):
            child_path = f"{path}.keys[{index}]" if path else f"keys[{index}]"
            child._validate_node(path=child_path, depth=depth + 1, inside_composite=True)
