"""
JSON-RPC client for the system under test.

The system under test is driven through a JSON-RPC 2.0 server. Errors come
back in three shapes:

- A JSON-RPC error object. Code -32601 means the method is not exposed,
  code -32603 is an internal error that is usually transient, anything else
  is a structured ledger failure carrying `{"status": ...}` in its data.
- A successful result `{"error": "NOT_IMPLEMENTED"}` for methods the server
  exposes but does not support.
- No response at all, which is a transport failure.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from tck_core.types import MethodNotFound, MethodNotImplemented, SutError, TransportError

from .config import (
    DEFAULT_TIMEOUT,
    INTERNAL_ERROR,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    NOT_IMPLEMENTED,
    RPC_MAX_RETRIES,
    RPC_RETRY_DELAY,
)

if TYPE_CHECKING:
    from tck_core.config import NetworkConfig

logger = logging.getLogger(__name__)


class JsonRpcClient:
    """
    Async JSON-RPC 2.0 client over a single `httpx.AsyncClient`.

    Use as an async context manager so the connection pool is released::

        async with JsonRpcClient("http://localhost:8544") as rpc:
            result = await rpc.request("generateKey", {"type": "ed25519PrivateKey"})
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = RPC_MAX_RETRIES,
        retry_delay: float = RPC_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            url: Endpoint of the JSON-RPC server.
            timeout: Per-request timeout in seconds.
            max_retries: Retries of a request that failed with an internal error.
            retry_delay: Pause between those retries in seconds.
            transport: Optional httpx transport, e.g. `httpx.MockTransport` in tests.
        """
        self.url = url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        *,
        expect_internal: bool = False,
    ) -> Any:
        """
        Call a method and return its result.

        Args:
            method: JSON-RPC method name.
            params: Method parameters. Omitted from the envelope when None.
            expect_internal: Raise internal errors immediately instead of retrying,
                for scenarios that expect the server to fail.

        Returns:
            The `result` member of the response.

        Raises:
            MethodNotFound: The server does not expose `method`.
            MethodNotImplemented: The server reports `method` as unimplemented.
            SutError: The server returned any other error.
            TransportError: The server could not be reached or replied garbage.
        """
        retries = 0
        while True:
            try:
                return await self._call(method, params)
            except SutError as exc:
                if exc.code != INTERNAL_ERROR or expect_internal or retries >= self.max_retries:
                    raise
                retries += 1
                logger.debug(
                    "%s failed with internal error, retry %d/%d in %.1fs",
                    method,
                    retries,
                    self.max_retries,
                    self.retry_delay,
                )
                await asyncio.sleep(self.retry_delay)

    async def _call(self, method: str, params: dict[str, Any] | None) -> Any:
        envelope: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
        }
        if params is not None:
            envelope["params"] = params

        logger.debug("-> %s %s", method, params)
        try:
            response = await self._client.post(self.url, json=envelope)
        except httpx.RequestError as exc:
            raise TransportError(f"Cannot reach {self.url}: {exc}", url=self.url) from exc

        if response.status_code >= 500 or not response.content:
            raise TransportError(
                f"Bad response from {self.url}: HTTP {response.status_code}",
                url=self.url,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Malformed JSON from {self.url}", url=self.url, status_code=response.status_code
            ) from exc
        if not isinstance(body, dict):
            raise TransportError(
                f"Malformed JSON-RPC envelope from {self.url}",
                url=self.url,
                status_code=response.status_code,
            )

        if error := body.get("error"):
            if not isinstance(error, dict):
                raise TransportError(
                    f"Malformed JSON-RPC error from {self.url}: {error!r}",
                    url=self.url,
                    status_code=response.status_code,
                )
            code = error.get("code", 0)
            message = error.get("message", "")
            data = error.get("data")
            if code == METHOD_NOT_FOUND:
                raise MethodNotFound(code, message, data)
            raise SutError(code, message, data)

        result = body.get("result")
        if isinstance(result, dict) and result.get("error") == NOT_IMPLEMENTED:
            raise MethodNotImplemented(0, f"{method} is not implemented")

        logger.debug("<- %s %s", method, result)
        return result


async def set_operator(client: JsonRpcClient, config: NetworkConfig) -> Any:
    """Install the operator account from `config` as the default signer."""
    params: dict[str, Any] = {
        "operatorAccountId": config.operator_account_id,
        "operatorPrivateKey": config.operator_account_private_key,
    }
    # Custom node addressing is only sent when configured. Otherwise the
    # server falls back to its default network.
    optional = {
        "nodeIp": config.node_ip,
        "nodeAccountId": config.node_account_id,
        "mirrorNetworkIp": config.mirror_network,
    }
    params.update({name: value for name, value in optional.items() if value is not None})
    return await client.request("setup", params)


async def reset(client: JsonRpcClient) -> Any:
    """Tear down the system under test's client state."""
    return await client.request("reset")
