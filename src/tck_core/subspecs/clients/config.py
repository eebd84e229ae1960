"""Client constants for the system-under-test driver and the mirror REST API."""

from __future__ import annotations

from typing import Final

DEFAULT_TIMEOUT: Final[float] = 30.0
"""HTTP request timeout in seconds."""

JSONRPC_VERSION: Final[str] = "2.0"

METHOD_NOT_FOUND: Final[int] = -32601
"""JSON-RPC code for a method the server does not expose."""

INTERNAL_ERROR: Final[int] = -32603
"""JSON-RPC code for an internal server error. Usually transient."""

RPC_MAX_RETRIES: Final[int] = 3
"""Retries of a request that failed with INTERNAL_ERROR."""

RPC_RETRY_DELAY: Final[float] = 1.0
"""Pause between INTERNAL_ERROR retries in seconds."""

NOT_IMPLEMENTED: Final[str] = "NOT_IMPLEMENTED"
"""Result error marker for methods the server exposes but does not support."""

MIRROR_API_PREFIX: Final[str] = "/api/v1"
"""Path prefix of the mirror REST API."""
