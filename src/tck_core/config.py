"""
Environment-sourced configuration.

Read once at the driver boundary and passed explicitly to whatever needs it.
Nothing inside the verification core reads the process environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final, Literal

from pydantic import ValidationError

from tck_core.types import ConfigError, StrictBaseModel

SUPPORTED_NETWORKS: Final[tuple[str, ...]] = ("local", "testnet")

DEFAULT_JSON_RPC_SERVER_URL: Final = "http://localhost:8544"
DEFAULT_MIRROR_NODE_REST_URL: Final = "http://127.0.0.1:5551"
DEFAULT_NODE_TIMEOUT: Final = 30.0

_REDACTED: Final = "***"
"""Placeholder left in sample env files in place of real operator credentials."""


class NetworkConfig(StrictBaseModel):
    """Where the system under test and its read paths live, and who pays."""

    network: Literal["local", "testnet"] = "local"
    """Target network."""

    json_rpc_server_url: str = DEFAULT_JSON_RPC_SERVER_URL
    """Endpoint of the system under test's JSON-RPC server."""

    mirror_node_rest_url: str = DEFAULT_MIRROR_NODE_REST_URL
    """Root of the mirror REST API."""

    operator_account_id: str | None = None
    """Default paying and signing account."""

    operator_account_private_key: str | None = None
    """Private key of the operator account."""

    node_ip: str | None = None
    """Consensus node address for custom local networks."""

    node_account_id: str | None = None
    """Account of the consensus node at `node_ip`."""

    mirror_network: str | None = None
    """Mirror address for custom local networks."""

    node_timeout: float = DEFAULT_NODE_TIMEOUT
    """Request timeout in seconds."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> NetworkConfig:
        """
        Build a config from environment variables.

        Args:
            environ: Variables to read. Defaults to `os.environ`.

        Raises:
            ConfigError: If NETWORK is unknown, NODE_TIMEOUT is not a number,
                or testnet operator credentials are missing or redacted.
        """
        env = os.environ if environ is None else environ

        network = env.get("NETWORK", "local").strip().lower()
        if network not in SUPPORTED_NETWORKS:
            raise ConfigError(
                f"Invalid NETWORK environment variable: '{network}'. "
                f"Supported values: {list(SUPPORTED_NETWORKS)}"
            )

        def optional(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        operator_id = optional("OPERATOR_ACCOUNT_ID")
        operator_key = optional("OPERATOR_ACCOUNT_PRIVATE_KEY")
        if network == "testnet":
            for name, value in (
                ("OPERATOR_ACCOUNT_ID", operator_id),
                ("OPERATOR_ACCOUNT_PRIVATE_KEY", operator_key),
            ):
                if value is None or value == _REDACTED:
                    raise ConfigError(f"{name} must be set to a real value for testnet")

        try:
            return cls(
                network=network,
                json_rpc_server_url=optional("JSON_RPC_SERVER_URL") or DEFAULT_JSON_RPC_SERVER_URL,
                mirror_node_rest_url=optional("MIRROR_NODE_REST_URL")
                or DEFAULT_MIRROR_NODE_REST_URL,
                operator_account_id=operator_id,
                operator_account_private_key=operator_key,
                node_ip=optional("NODE_IP"),
                node_account_id=optional("NODE_ACCOUNT_ID"),
                mirror_network=optional("MIRROR_NETWORK"),
                node_timeout=optional("NODE_TIMEOUT") or DEFAULT_NODE_TIMEOUT,
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid network configuration: {exc}") from exc
