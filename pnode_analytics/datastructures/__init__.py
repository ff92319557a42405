"""
pnode_analytics Datastructures Module.

Immutable value types shared by the derivation core, the transport client
and the CLI.

Key datastructures:
- RawNodeRecord: one pNode exactly as pRPC reported it
- AnnotatedNode: a pNode enriched with status, health score and display strings
- NodeStatus: online / degraded / offline
- HealthFactors: the four sub-scores behind a health score
"""

from __future__ import annotations

from .node_types import (
    DEFAULT_RPC_PORT,
    AnnotatedNode,
    HealthFactors,
    NodeStatus,
    RawNodeRecord,
)

__all__ = [
    "DEFAULT_RPC_PORT",
    "AnnotatedNode",
    "HealthFactors",
    "NodeStatus",
    "RawNodeRecord",
]
