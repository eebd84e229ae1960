"""
Clients for the system under test and its two read paths.

- JsonRpcClient drives the system under test.
- ConsensusInfoClient is the strongly-consistent read path.
- MirrorNodeClient is the eventually-consistent read path.
- RpcKeyGenerator sources key material from the system under test.
"""

from .consensus import ConsensusInfoClient
from .keys import RpcKeyGenerator
from .mirror import MirrorNodeClient
from .rpc import JsonRpcClient, reset, set_operator

__all__ = [
    "ConsensusInfoClient",
    "JsonRpcClient",
    "MirrorNodeClient",
    "RpcKeyGenerator",
    "reset",
    "set_operator",
]
