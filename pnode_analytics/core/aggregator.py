"""
Network aggregation over annotated pNodes.

Every function here recomputes from scratch on each call and never mutates
the node sequence it is given.
"""

from __future__ import annotations

from collections.abc import Sequence

from pnode_analytics.core.formatting import calculate_percent, clamp
from pnode_analytics.core.health import FleetContext
from pnode_analytics.core.statistics import (
    AttentionReport,
    HealthSummary,
    NetworkHealthLevel,
    NetworkStats,
    StatusShare,
    VersionShare,
)
from pnode_analytics.datastructures.node_types import AnnotatedNode, NodeStatus
from pnode_analytics.datastructures.type_aliases import Percentage

LOW_HEALTH_THRESHOLD = 50
HIGH_STORAGE_PERCENT: Percentage = 90.0

CRITICAL_OFFLINE_PERCENT: Percentage = 30.0
WARNING_OFFLINE_PERCENT: Percentage = 10.0
WARNING_ONLINE_PERCENT: Percentage = 80.0


def calculate_network_stats(nodes: Sequence[AnnotatedNode]) -> NetworkStats:
    """Reduce a node collection to network-wide statistics in one pass."""
    if not nodes:
        return NetworkStats()

    status_counts = dict.fromkeys(NodeStatus, 0)
    total_committed = 0
    total_used = 0
    total_uptime = 0.0
    total_health = 0
    version_counts: dict[str, int] = {}

    for node in nodes:
        status_counts[node.status] += 1
        total_committed += node.storage_committed
        total_used += node.storage_used
        total_uptime += node.uptime
        total_health += node.health_score
        version_counts[node.version] = version_counts.get(node.version, 0) + 1

    count = len(nodes)
    utilization = (
        clamp(total_used / total_committed, 0.0, 1.0) if total_committed > 0 else 0.0
    )

    return NetworkStats(
        total_nodes=count,
        online_nodes=status_counts[NodeStatus.ONLINE],
        degraded_nodes=status_counts[NodeStatus.DEGRADED],
        offline_nodes=status_counts[NodeStatus.OFFLINE],
        total_storage_committed=total_committed,
        total_storage_used=total_used,
        average_uptime=total_uptime / count,
        average_health_score=total_health / count,
        version_distribution=version_counts,
        storage_utilization=utilization,
    )


def version_distribution(nodes: Sequence[AnnotatedNode]) -> list[VersionShare]:
    """Version shares, most common first."""
    counts: dict[str, int] = {}
    for node in nodes:
        counts[node.version] = counts.get(node.version, 0) + 1

    shares = [
        VersionShare(
            version=version,
            count=count,
            percentage=calculate_percent(count, len(nodes)),
        )
        for version, count in counts.items()
    ]
    return sorted(shares, key=lambda share: share.count, reverse=True)


def status_distribution(nodes: Sequence[AnnotatedNode]) -> list[StatusShare]:
    """Share of every status, in online/degraded/offline order."""
    counts = dict.fromkeys(NodeStatus, 0)
    for node in nodes:
        counts[node.status] += 1
    return [
        StatusShare(
            status=status,
            count=count,
            percentage=calculate_percent(count, len(nodes)),
        )
        for status, count in counts.items()
    ]


def rank_nodes_by_health(nodes: Sequence[AnnotatedNode]) -> list[AnnotatedNode]:
    return sorted(nodes, key=lambda node: node.health_score, reverse=True)


def top_nodes(nodes: Sequence[AnnotatedNode], count: int = 10) -> list[AnnotatedNode]:
    return rank_nodes_by_health(nodes)[: max(count, 0)]


def nodes_needing_attention(
    nodes: Sequence[AnnotatedNode],
    fleet: FleetContext,
    *,
    low_health_threshold: int = LOW_HEALTH_THRESHOLD,
    high_storage_percent: Percentage = HIGH_STORAGE_PERCENT,
) -> AttentionReport:
    """Outdated, unhealthy and nearly-full nodes.

    A node is outdated when it does not run the fleet's canonical version;
    without a canonical version nothing is outdated.
    """
    canonical = fleet.canonical_version
    return AttentionReport(
        outdated=tuple(
            node for node in nodes if canonical is not None and node.version != canonical
        ),
        low_health=tuple(
            node for node in nodes if node.health_score < low_health_threshold
        ),
        high_storage=tuple(
            node
            for node in nodes
            if (node.utilization_percent or 0.0) > high_storage_percent
        ),
    )


def network_health_summary(stats: NetworkStats) -> HealthSummary:
    """Classify the whole network from its status counts."""
    if stats.total_nodes == 0:
        return HealthSummary(NetworkHealthLevel.HEALTHY, "No nodes reported")

    online_percent = calculate_percent(stats.online_nodes, stats.total_nodes)
    offline_percent = calculate_percent(stats.offline_nodes, stats.total_nodes)

    if offline_percent > CRITICAL_OFFLINE_PERCENT:
        return HealthSummary(
            NetworkHealthLevel.CRITICAL,
            f"{offline_percent:.0f}% of nodes are offline",
        )
    if offline_percent > WARNING_OFFLINE_PERCENT or online_percent < WARNING_ONLINE_PERCENT:
        return HealthSummary(
            NetworkHealthLevel.WARNING,
            f"{stats.degraded_nodes + stats.offline_nodes} nodes need attention",
        )
    return HealthSummary(
        NetworkHealthLevel.HEALTHY,
        f"Network is healthy with {online_percent:.0f}% nodes online",
    )
