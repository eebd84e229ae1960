"""
Snapshot field helpers.

The two read paths disagree on more than freshness:

- Naming: the consensus source uses camelCase (`adminKey`), the mirror uses
  snake_case (`admin_key`).
- Default values: an absent key, memo or entity reference may come back as
  None on one side and as an empty string or the null entity id on the other.
- Key shape: the mirror wraps keys as `{"_type": ..., "key": ...}`.

These helpers take care of the differences so assertions can compare values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

UNSET_SENTINELS: Final[frozenset[Any]] = frozenset({None, "", "0.0.0"})
"""Values either source uses to mean "not set"."""

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def to_mirror_field(name: str) -> str:
    """Translate a consensus field name to its mirror spelling: `adminKey` -> `admin_key`."""
    return _CAMEL_BOUNDARY.sub(r"\1_\2", name).lower()


def is_unset(value: Any) -> bool:
    """True if the value is one of the "not set" sentinels."""
    try:
        return value in UNSET_SENTINELS
    except TypeError:
        # Unhashable values (dicts, lists) are never sentinels.
        return False


def values_match(expected: Any, actual: Any) -> bool:
    """
    Compare two field values, treating all sentinels as equal.

    Strings compare case-sensitively. Numbers compare by value, so a mirror
    integer matches a consensus integer-valued string.
    """
    if is_unset(expected) or is_unset(actual):
        return is_unset(expected) and is_unset(actual)
    if expected == actual:
        return True
    if isinstance(expected, (int, str)) and isinstance(actual, (int, str)):
        return str(expected) == str(actual)
    return False


def lookup(snapshot: Mapping[str, Any], path: str) -> Any:
    """
    Fetch a possibly nested field using a dotted path, e.g. "key.key".

    Missing fields resolve to None rather than raising, since a field that is
    not there yet is a mismatch to poll on, not an error.
    """
    value: Any = snapshot
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def mirror_key_value(raw: Any) -> str | None:
    """
    Extract the key hex from a mirror key field.

    Accepts the `{"_type": ..., "key": ...}` object, a bare string, or None.
    """
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        key = raw.get("key")
        return key if isinstance(key, str) and key else None
    if isinstance(raw, str):
        return raw or None
    return None
