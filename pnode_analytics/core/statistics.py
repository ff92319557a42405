"""
Statistics dataclasses for pnode_analytics.

Well-typed results of the network aggregation routines, used instead of
``dict[str, Any]`` returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pnode_analytics.datastructures.node_types import AnnotatedNode, NodeStatus
from pnode_analytics.datastructures.type_aliases import (
    ByteCount,
    JsonDict,
    Percentage,
    UtilizationRatio,
    VersionString,
)


@dataclass(frozen=True, slots=True)
class NetworkStats:
    """Network-wide summary of one node collection."""

    total_nodes: int = 0
    online_nodes: int = 0
    degraded_nodes: int = 0
    offline_nodes: int = 0
    total_storage_committed: ByteCount = 0
    total_storage_used: ByteCount = 0
    average_uptime: float = 0.0
    average_health_score: float = 0.0
    version_distribution: dict[VersionString, int] = field(default_factory=dict)
    storage_utilization: UtilizationRatio = 0.0

    @property
    def status_counts(self) -> dict[NodeStatus, int]:
        return {
            NodeStatus.ONLINE: self.online_nodes,
            NodeStatus.DEGRADED: self.degraded_nodes,
            NodeStatus.OFFLINE: self.offline_nodes,
        }

    def to_dict(self) -> JsonDict:
        return {
            "total_nodes": self.total_nodes,
            "online_nodes": self.online_nodes,
            "degraded_nodes": self.degraded_nodes,
            "offline_nodes": self.offline_nodes,
            "total_storage_committed": self.total_storage_committed,
            "total_storage_used": self.total_storage_used,
            "average_uptime": self.average_uptime,
            "average_health_score": self.average_health_score,
            "version_distribution": dict(self.version_distribution),
            "storage_utilization": self.storage_utilization,
        }


@dataclass(frozen=True, slots=True)
class VersionShare:
    """How many nodes run one version."""

    version: VersionString
    count: int
    percentage: Percentage


@dataclass(frozen=True, slots=True)
class StatusShare:
    """How many nodes are in one status."""

    status: NodeStatus
    count: int
    percentage: Percentage


@dataclass(frozen=True, slots=True)
class AttentionReport:
    """Nodes that an operator should look at."""

    outdated: tuple[AnnotatedNode, ...] = ()
    low_health: tuple[AnnotatedNode, ...] = ()
    high_storage: tuple[AnnotatedNode, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "outdated": len(self.outdated),
            "low_health": len(self.low_health),
            "high_storage": len(self.high_storage),
        }


class NetworkHealthLevel(Enum):
    """Overall verdict on the network."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True, slots=True)
class HealthSummary:
    """Overall verdict with a human-readable explanation."""

    level: NetworkHealthLevel
    message: str
