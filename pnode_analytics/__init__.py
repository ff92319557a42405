"""
pnode_analytics - health classification and network statistics for pNodes

Turns raw pNode telemetry from a storage network's pRPC interface into a
display-ready dataset: every node gets a status (online / degraded /
offline) and a 0-100 health score, and the whole fleet reduces to
network-wide statistics.

## Architecture

- **datastructures**: immutable node records and shared type aliases
- **core**: classifier, health scorer, normalizer, aggregator, filter/sort,
  configuration and logging
- **client**: asynchronous pRPC transport
- **cli**: command-line presentation

## Quick Start

```python
import asyncio

from pnode_analytics import PRPCClient, calculate_network_stats, normalize_nodes

raws = asyncio.run(PRPCClient().fetch_all())
nodes = normalize_nodes(raws)
stats = calculate_network_stats(nodes)
```
"""

from .client import PRPCClient, PRPCError
from .core import (
    AnalyticsSettings,
    FleetContext,
    HealthScorer,
    NetworkStats,
    NodeFilters,
    ScoringConfig,
    SortField,
    SortOrder,
    apply_filters,
    calculate_health_factors,
    calculate_health_score,
    calculate_network_stats,
    classify_status,
    find_node,
    lookup_node,
    normalize_node,
    normalize_nodes,
)
from .datastructures import AnnotatedNode, HealthFactors, NodeStatus, RawNodeRecord

__version__ = "0.1.0"

__all__ = [
    # Datastructures
    "AnnotatedNode",
    "HealthFactors",
    "NodeStatus",
    "RawNodeRecord",
    # Core
    "AnalyticsSettings",
    "FleetContext",
    "HealthScorer",
    "NetworkStats",
    "NodeFilters",
    "ScoringConfig",
    "SortField",
    "SortOrder",
    "apply_filters",
    "calculate_health_factors",
    "calculate_health_score",
    "calculate_network_stats",
    "classify_status",
    "find_node",
    "lookup_node",
    "normalize_node",
    "normalize_nodes",
    # Client
    "PRPCClient",
    "PRPCError",
]
