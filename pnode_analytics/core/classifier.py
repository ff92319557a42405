"""Status classification of pNodes by staleness."""

from __future__ import annotations

import math

from pnode_analytics.core.config import StatusThresholds
from pnode_analytics.datastructures.node_types import NodeStatus
from pnode_analytics.datastructures.type_aliases import DurationSeconds, Timestamp

DEFAULT_THRESHOLDS = StatusThresholds()


def elapsed_since(last_seen_timestamp: Timestamp, now: Timestamp) -> DurationSeconds:
    """Seconds since ``last_seen_timestamp``, clamped to >= 0 (NaN stays NaN)."""
    elapsed = now - last_seen_timestamp
    if math.isnan(elapsed):
        return elapsed
    return max(0.0, elapsed)


def classify_elapsed(
    elapsed: DurationSeconds, thresholds: StatusThresholds = DEFAULT_THRESHOLDS
) -> NodeStatus:
    """Map staleness to a status; each threshold belongs to the healthier band."""
    if math.isnan(elapsed):
        return NodeStatus.OFFLINE
    if elapsed <= thresholds.online_seconds:
        return NodeStatus.ONLINE
    if elapsed <= thresholds.degraded_seconds:
        return NodeStatus.DEGRADED
    return NodeStatus.OFFLINE


def classify_status(
    last_seen_timestamp: Timestamp,
    now: Timestamp,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> NodeStatus:
    """Status of a node last seen at ``last_seen_timestamp``, as of ``now``.

    Future timestamps count as zero elapsed and classify as online.
    """
    return classify_elapsed(elapsed_since(last_seen_timestamp, now), thresholds)
