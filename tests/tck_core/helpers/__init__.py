"""Test helpers for tck_core unit tests."""

from .mocks import (
    CountingKeyGenerator,
    FakeConsensusSource,
    RecordingSleep,
    ScriptedMirrorSource,
)

__all__ = [
    "CountingKeyGenerator",
    "FakeConsensusSource",
    "RecordingSleep",
    "ScriptedMirrorSource",
]
