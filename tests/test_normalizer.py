import math
from datetime import UTC, datetime

from pnode_analytics.core.config import ScoringConfig, StatusThresholds
from pnode_analytics.core.health import FleetContext
from pnode_analytics.core.normalizer import (
    find_node,
    lookup_node,
    normalize_node,
    normalize_nodes,
)
from pnode_analytics.datastructures.node_types import NodeStatus


class TestNormalizeNode:
    def test_derived_fields(self, make_raw, now):
        raw = make_raw(
            pubkey="NodeKey",
            address="173.212.207.32:9001",
            storage_committed=1536,
            storage_used=1024,
            uptime=3 * 86400 + 4 * 3600,
        )
        fleet = FleetContext.from_records([raw])
        node = normalize_node(raw, now=now, fleet=fleet)

        assert node.id == "NodeKey"
        assert node.ip == "173.212.207.32"
        assert node.gossip_port == 9001
        assert node.status is NodeStatus.ONLINE
        assert node.storage_committed_formatted == "1.5 KB"
        assert node.storage_used_formatted == "1 KB"
        assert node.uptime_formatted == "3d 4h"
        assert node.last_seen_date == datetime.fromtimestamp(now - 60, tz=UTC)

    def test_raw_fields_are_preserved(self, make_raw, now):
        raw = make_raw()
        node = normalize_node(raw, now=now, fleet=FleetContext.from_records([raw]))
        assert node.raw == raw

    def test_unparseable_address_keeps_whole_address(self, make_raw, now):
        raw = make_raw(address="not-an-address")
        node = normalize_node(raw, now=now, fleet=FleetContext.from_records([raw]))
        assert node.ip == "not-an-address"
        assert node.gossip_port == 0

    def test_non_ascii_port_digits_do_not_abort_the_fleet(self, make_raw, now):
        records = [
            make_raw(pubkey="Superscript", address="10.0.0.1:9¹"),
            make_raw(pubkey="Plain", address="10.0.0.2:9001"),
        ]
        nodes = normalize_nodes(records, now=now)
        assert (nodes[0].ip, nodes[0].gossip_port) == ("10.0.0.1:9¹", 0)
        assert (nodes[1].ip, nodes[1].gossip_port) == ("10.0.0.2", 9001)

    def test_status_uses_configured_thresholds(self, make_raw, now):
        raw = make_raw(last_seen_timestamp=now - 200)
        config = ScoringConfig(
            thresholds=StatusThresholds(online_seconds=100, degraded_seconds=150)
        )
        node = normalize_node(
            raw, now=now, fleet=FleetContext.from_records([raw]), config=config
        )
        assert node.status is NodeStatus.OFFLINE

    def test_nan_timestamp_is_offline_and_bounded(self, make_raw, now):
        raw = make_raw(last_seen_timestamp=math.nan)
        node = normalize_node(raw, now=now, fleet=FleetContext.from_records([raw]))
        assert node.status is NodeStatus.OFFLINE
        assert 0 <= node.health_score <= 100


class TestNormalizeNodes:
    def test_fleet(self, fleet_records, now):
        nodes = normalize_nodes(fleet_records, now=now)
        assert [node.pubkey for node in nodes] == ["AlphaKey", "BravoKey", "CharlieKey"]
        assert [node.status for node in nodes] == [
            NodeStatus.ONLINE,
            NodeStatus.DEGRADED,
            NodeStatus.OFFLINE,
        ]
        assert [node.health_score for node in nodes] == [98, 28, 15]

    def test_charlie_display_fields(self, fleet_records, now):
        charlie = normalize_nodes(fleet_records, now=now)[2]
        assert charlie.ip == "192.168.1.7"
        assert charlie.gossip_port == 9002
        assert charlie.storage_committed_formatted == "0 B"
        assert charlie.uptime_formatted == "0s"

    def test_deterministic(self, fleet_records, now):
        assert normalize_nodes(fleet_records, now=now) == normalize_nodes(
            fleet_records, now=now
        )

    def test_empty(self, now):
        assert normalize_nodes([], now=now) == []

    def test_accepts_iterators(self, fleet_records, now):
        nodes = normalize_nodes(iter(fleet_records), now=now)
        assert len(nodes) == 3

    def test_pinned_version_changes_scores(self, fleet_records, now):
        pinned = ScoringConfig(pinned_version="0.9.0")
        default_nodes = normalize_nodes(fleet_records, now=now)
        pinned_nodes = normalize_nodes(fleet_records, now=now, config=pinned)
        assert pinned_nodes[2].health_score > default_nodes[2].health_score
        assert pinned_nodes[0].health_score < default_nodes[0].health_score


class TestLookup:
    def test_find_node(self, fleet_records, now):
        nodes = normalize_nodes(fleet_records, now=now)
        assert find_node(nodes, "BravoKey") is nodes[1]
        assert find_node(nodes, "MissingKey") is None

    def test_lookup_matches_full_normalization(self, fleet_records, now):
        nodes = normalize_nodes(fleet_records, now=now)
        assert lookup_node(fleet_records, "CharlieKey", now=now) == nodes[2]

    def test_lookup_missing(self, fleet_records, now):
        assert lookup_node(fleet_records, "MissingKey", now=now) is None
