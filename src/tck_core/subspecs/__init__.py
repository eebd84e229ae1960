"""Subspecifications of the verification core."""

from .consistency import EntityReconciler, verify
from .keys import GeneratedTopology, KeyTopologySpec, TopologyGenerator, flatten

__all__ = [
    "EntityReconciler",
    "GeneratedTopology",
    "KeyTopologySpec",
    "TopologyGenerator",
    "flatten",
    "verify",
]
