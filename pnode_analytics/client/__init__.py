"""
pnode_analytics Client Module

Transport to the pRPC interface of the storage network.
"""

from __future__ import annotations

from .prpc_client import (
    PRPCClient,
    PRPCError,
    PRPCHTTPError,
    PRPCProtocolError,
    PRPCRemoteError,
    PRPCUnavailableError,
    parse_pod_records,
)

__all__ = [
    "PRPCClient",
    "PRPCError",
    "PRPCHTTPError",
    "PRPCProtocolError",
    "PRPCRemoteError",
    "PRPCUnavailableError",
    "parse_pod_records",
]
