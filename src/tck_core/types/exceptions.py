"""
Exception hierarchy for the verification core.

Two families matter to callers:

- Fixture errors (`GenerationError`, `ConfigError`) mean the test itself is
  broken. They are raised before any I/O and must abort the scenario.
- Observation errors (`EncodingMismatch`, `MirrorEntityNotFound`) mean the
  system under test produced observably wrong (or not yet replicated) state.
  They subclass `AssertionError` so the consistency verifier treats them as
  mismatches and pytest reports them as test failures.

`TransportError` is neither: it is retried on its own budget and
never counted as a mismatch.
"""

from __future__ import annotations

from typing import Any


class TckError(Exception):
    """
    Base exception for all verification-core errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class GenerationError(TckError):
    """
    Raised when a key topology spec is structurally invalid.

    Always raised synchronously during validation, before any key primitive
    is invoked. Never retried.

    Attributes:
        reason: Error category. Currently always "InvalidSpec".
        path: Location of the offending node within the spec tree,
            e.g. "keys[1].keys[0]". Empty for the root.
        detail: What is wrong with the node.
    """

    def __init__(self, detail: str, *, path: str = "", reason: str = "InvalidSpec") -> None:
        self.reason = reason
        self.path = path
        self.detail = detail

        location = path or "<root>"
        super().__init__(f"{reason} at {location}: {detail}")


class ConfigError(TckError, ValueError):
    """Raised when environment-sourced configuration is missing or malformed."""


class EncodingMismatch(TckError, AssertionError):
    """
    Raised when two key encodings do not represent the same key material.

    Attributes:
        expected: The encoding the scenario expected.
        actual: The encoding observed on a read path.
        label: Which read path or field produced `actual`.
    """

    def __init__(self, expected: str | None, actual: str | None, *, label: str = "key") -> None:
        self.expected = expected
        self.actual = actual
        self.label = label

        super().__init__(f"{label} mismatch: expected {expected!r}, got {actual!r}")


class MirrorEntityNotFound(TckError, AssertionError):
    """
    Raised when the mirror source does not know the entity yet.

    A 404 from an eventually-consistent source usually means replication has
    not caught up, so this is a mismatch (retried by polling), not a transport
    failure.

    Attributes:
        url: The URL that returned 404.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Entity not found on mirror: {url}")


class TransportError(TckError):
    """
    Raised when a query client could not obtain a response.

    Covers connection failures, timeouts, 5xx responses and empty bodies.

    Attributes:
        url: Target of the failed request, if known.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class SutError(TckError):
    """
    Structured failure returned by the system under test.

    Attributes:
        code: JSON-RPC error code.
        data: Optional error payload. Ledger failures carry `{"status": ...}`.
    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(f"[{code}] {message}")

    @property
    def status(self) -> str | None:
        """Ledger status string from the error payload, if any."""
        if isinstance(self.data, dict):
            return self.data.get("status")
        return None


class MethodNotFound(SutError):
    """The system under test does not expose the requested method."""


class MethodNotImplemented(SutError):
    """The system under test exposes the method but reports it as unimplemented."""
