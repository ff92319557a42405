"""
Semantic type aliases for pnode_analytics datastructures.

This module provides meaningful type aliases that make the codebase more
self-documenting by replacing raw types like str, int, float with semantic
aliases.
"""

from typing import Any, TypeAlias

# Time and timestamp types
Timestamp: TypeAlias = float  # Epoch seconds
DurationSeconds: TypeAlias = float

# Identity types
NodePubkey: TypeAlias = str  # Opaque identity key reported by pRPC
NodeAddress: TypeAlias = str  # "host:port" gossip address
HostAddress: TypeAlias = str
PortNumber: TypeAlias = int
VersionString: TypeAlias = str

# Size and capacity types
ByteCount: TypeAlias = int
Percentage: TypeAlias = float  # 0.0 - 100.0
UtilizationRatio: TypeAlias = float  # 0.0 - 1.0

# Scoring types
SubScore: TypeAlias = float  # 0.0 - 100.0, before weighting
HealthScoreValue: TypeAlias = int  # 0 - 100, after weighting and rounding
ScoreWeight: TypeAlias = float

# Transport types
UrlString: TypeAlias = str
RPCMethodName: TypeAlias = str
RPCRequestId: TypeAlias = int | str

# Serialization types
JsonDict: TypeAlias = dict[str, Any]
