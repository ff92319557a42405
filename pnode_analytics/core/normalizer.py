"""
Node normalization: RawNodeRecord -> AnnotatedNode.

Normalization is deterministic in its inputs. The only environmental inputs,
the current time and the fleet context, are explicit parameters;
``normalize_nodes`` is the one place that reads the wall clock, and only
when the caller does not supply ``now``.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence

from loguru import logger

from pnode_analytics.core.classifier import classify_status
from pnode_analytics.core.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from pnode_analytics.core.formatting import (
    format_bytes,
    format_uptime,
    parse_address,
    timestamp_to_datetime,
)
from pnode_analytics.core.health import FleetContext, calculate_health_score
from pnode_analytics.datastructures.node_types import AnnotatedNode, RawNodeRecord
from pnode_analytics.datastructures.type_aliases import NodePubkey, Timestamp


def normalize_node(
    raw: RawNodeRecord,
    *,
    now: Timestamp,
    fleet: FleetContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> AnnotatedNode:
    """Annotate one record with status, health score and display fields."""
    ip, gossip_port = parse_address(raw.address)
    status = classify_status(raw.last_seen_timestamp, now, config.thresholds)
    health_score = calculate_health_score(
        raw, now=now, fleet=fleet, status=status, config=config
    )

    return AnnotatedNode(
        address=raw.address,
        last_seen_timestamp=raw.last_seen_timestamp,
        pubkey=raw.pubkey,
        is_public=raw.is_public,
        rpc_port=raw.rpc_port,
        storage_committed=raw.storage_committed,
        storage_usage_percent=raw.storage_usage_percent,
        storage_used=raw.storage_used,
        uptime=raw.uptime,
        version=raw.version,
        id=raw.pubkey,
        ip=ip,
        gossip_port=gossip_port,
        status=status,
        health_score=health_score,
        last_seen_date=timestamp_to_datetime(raw.last_seen_timestamp),
        storage_committed_formatted=format_bytes(raw.storage_committed),
        storage_used_formatted=format_bytes(raw.storage_used),
        uptime_formatted=format_uptime(raw.uptime),
    )


def normalize_nodes(
    raws: Iterable[RawNodeRecord],
    *,
    now: Timestamp | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[AnnotatedNode]:
    """Annotate a whole fleet, computing the fleet context once."""
    records = list(raws)
    if now is None:
        now = time.time()
    fleet = FleetContext.from_records(records, config.pinned_version)

    nodes = [
        normalize_node(record, now=now, fleet=fleet, config=config)
        for record in records
    ]
    logger.debug(
        "Normalized {} nodes (canonical version: {})",
        len(nodes),
        fleet.canonical_version,
    )
    return nodes


def find_node(
    nodes: Iterable[AnnotatedNode], pubkey: NodePubkey
) -> AnnotatedNode | None:
    """The node with ``pubkey``, or None."""
    for node in nodes:
        if node.pubkey == pubkey:
            return node
    return None


def lookup_node(
    raws: Sequence[RawNodeRecord],
    pubkey: NodePubkey,
    *,
    now: Timestamp,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> AnnotatedNode | None:
    """Normalize only the record with ``pubkey``, scored against the whole set."""
    for record in raws:
        if record.pubkey == pubkey:
            fleet = FleetContext.from_records(raws, config.pinned_version)
            return normalize_node(record, now=now, fleet=fleet, config=config)
    logger.debug("Node {} not found among {} records", pubkey, len(raws))
    return None
