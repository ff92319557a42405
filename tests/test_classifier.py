import math

import pytest

from pnode_analytics.core.classifier import classify_elapsed, classify_status, elapsed_since
from pnode_analytics.core.config import StatusThresholds
from pnode_analytics.datastructures.node_types import NodeStatus

NOW = 1_700_000_000.0


class TestClassifyStatus:
    @pytest.mark.parametrize(
        "elapsed,expected",
        [
            (0, NodeStatus.ONLINE),
            (60, NodeStatus.ONLINE),
            (300, NodeStatus.ONLINE),
            (300.001, NodeStatus.DEGRADED),
            (600, NodeStatus.DEGRADED),
            (900, NodeStatus.DEGRADED),
            (900.001, NodeStatus.OFFLINE),
            (3600, NodeStatus.OFFLINE),
        ],
    )
    def test_default_bands(self, elapsed, expected):
        assert classify_status(NOW - elapsed, NOW) is expected

    def test_future_timestamps_are_online(self):
        assert classify_status(NOW + 10_000, NOW) is NodeStatus.ONLINE

    def test_nan_timestamp_is_offline(self):
        assert classify_status(math.nan, NOW) is NodeStatus.OFFLINE

    def test_infinite_staleness_is_offline(self):
        assert classify_status(-math.inf, NOW) is NodeStatus.OFFLINE

    def test_custom_thresholds(self):
        thresholds = StatusThresholds(online_seconds=120, degraded_seconds=300)
        assert classify_status(NOW - 120, NOW, thresholds) is NodeStatus.ONLINE
        assert classify_status(NOW - 200, NOW, thresholds) is NodeStatus.DEGRADED
        assert classify_status(NOW - 301, NOW, thresholds) is NodeStatus.OFFLINE

    def test_collapsed_degraded_band(self):
        thresholds = StatusThresholds(online_seconds=60, degraded_seconds=60)
        assert classify_elapsed(60, thresholds) is NodeStatus.ONLINE
        assert classify_elapsed(61, thresholds) is NodeStatus.OFFLINE


def test_elapsed_since_clamps_future_to_zero():
    assert elapsed_since(NOW + 50, NOW) == 0.0
    assert elapsed_since(NOW - 50, NOW) == 50.0


def test_thresholds_validation():
    with pytest.raises(ValueError, match="degraded_seconds"):
        StatusThresholds(online_seconds=300, degraded_seconds=100)
    with pytest.raises(ValueError, match="online_seconds"):
        StatusThresholds(online_seconds=-1, degraded_seconds=100)
