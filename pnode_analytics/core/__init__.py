"""
pnode_analytics Core Module

The derivation layer: status classification, health scoring, node
normalization, network aggregation and filter/sort. Everything here is
synchronous and side-effect free.
"""

from .aggregator import (
    calculate_network_stats,
    network_health_summary,
    nodes_needing_attention,
    rank_nodes_by_health,
    status_distribution,
    top_nodes,
    version_distribution,
)
from .classifier import classify_elapsed, classify_status, elapsed_since
from .config import (
    AnalyticsSettings,
    HealthWeights,
    PRPCSettings,
    ScoringConfig,
    StatusThresholds,
)
from .filtering import (
    NodeFilters,
    SortField,
    SortOrder,
    apply_filters,
    filter_nodes,
    sort_nodes,
)
from .health import (
    FleetContext,
    HealthScorer,
    calculate_health_factors,
    calculate_health_score,
    health_score_label,
)
from .normalizer import find_node, lookup_node, normalize_node, normalize_nodes
from .statistics import (
    AttentionReport,
    HealthSummary,
    NetworkHealthLevel,
    NetworkStats,
    StatusShare,
    VersionShare,
)

__all__ = [
    "AnalyticsSettings",
    "AttentionReport",
    "FleetContext",
    "HealthScorer",
    "HealthSummary",
    "HealthWeights",
    "NetworkHealthLevel",
    "NetworkStats",
    "NodeFilters",
    "PRPCSettings",
    "ScoringConfig",
    "SortField",
    "SortOrder",
    "StatusShare",
    "StatusThresholds",
    "VersionShare",
    "apply_filters",
    "calculate_health_factors",
    "calculate_health_score",
    "calculate_network_stats",
    "classify_elapsed",
    "classify_status",
    "elapsed_since",
    "filter_nodes",
    "find_node",
    "health_score_label",
    "lookup_node",
    "network_health_summary",
    "nodes_needing_attention",
    "normalize_node",
    "normalize_nodes",
    "rank_nodes_by_health",
    "sort_nodes",
    "status_distribution",
    "top_nodes",
    "version_distribution",
]
