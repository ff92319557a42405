import math

import pytest

from pnode_analytics.datastructures.node_types import (
    DEFAULT_RPC_PORT,
    HealthFactors,
    NodeStatus,
    RawNodeRecord,
)

POD = {
    "address": "173.212.207.32:9001",
    "is_public": True,
    "last_seen_timestamp": 1_700_000_000,
    "pubkey": "8xPdN2kT5vVsQ1oFpWbZ7",
    "rpc_port": 6000,
    "storage_committed": 104857600,
    "storage_usage_percent": 12.5,
    "storage_used": 13107200,
    "uptime": 86400,
    "version": "0.7.3",
}


class TestRawNodeRecordFromDict:
    def test_full_pod(self):
        record = RawNodeRecord.from_dict(POD)
        assert record.pubkey == POD["pubkey"]
        assert record.address == POD["address"]
        assert record.last_seen_timestamp == 1_700_000_000.0
        assert record.is_public is True
        assert record.storage_committed == 104857600
        assert record.storage_usage_percent == 12.5
        assert record.uptime == 86400.0
        assert record.version == "0.7.3"

    def test_nullable_fields_default(self):
        record = RawNodeRecord.from_dict(
            {
                "address": "10.0.0.1:9001",
                "pubkey": "Key",
                "last_seen_timestamp": 1,
                "is_public": None,
                "rpc_port": None,
                "storage_committed": None,
                "storage_usage_percent": None,
                "storage_used": None,
                "uptime": None,
                "version": None,
            }
        )
        assert record.is_public is False
        assert record.rpc_port == DEFAULT_RPC_PORT
        assert record.storage_committed == 0
        assert record.storage_used == 0
        assert record.storage_usage_percent is None
        assert record.uptime == 0.0
        assert record.version == ""

    @pytest.mark.parametrize("missing", ["pubkey", "address", "last_seen_timestamp"])
    def test_identifying_fields_required(self, missing):
        payload = {key: value for key, value in POD.items() if key != missing}
        with pytest.raises(ValueError, match="requires"):
            RawNodeRecord.from_dict(payload)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            ("TRUE ", True),
            ("false", False),
            ("no", False),
            (1, False),
            ([], False),
            ({"public": True}, False),
        ],
    )
    def test_is_public_coercion(self, value, expected):
        record = RawNodeRecord.from_dict({**POD, "is_public": value})
        assert record.is_public is expected

    def test_garbage_timestamp_becomes_nan(self):
        record = RawNodeRecord.from_dict({**POD, "last_seen_timestamp": "yesterday"})
        assert math.isnan(record.last_seen_timestamp)

    def test_numeric_strings_are_coerced(self):
        record = RawNodeRecord.from_dict({**POD, "storage_used": "2048", "uptime": "12.5"})
        assert record.storage_used == 2048
        assert record.uptime == 12.5


class TestUtilizationPercent:
    def test_prefers_reported_percent(self, make_raw):
        record = make_raw(storage_usage_percent=12.5, storage_used=900, storage_committed=1000)
        assert record.utilization_percent == 12.5

    def test_falls_back_to_ratio(self, make_raw):
        record = make_raw(storage_usage_percent=None, storage_used=250, storage_committed=1000)
        assert record.utilization_percent == pytest.approx(25.0)

    def test_unknown_without_commitment(self, make_raw):
        record = make_raw(storage_usage_percent=None, storage_used=0, storage_committed=0)
        assert record.utilization_percent is None


def test_record_is_immutable(make_raw):
    record = make_raw()
    with pytest.raises(AttributeError):
        record.version = "2.0.0"


def test_record_to_dict_round_trips(make_raw):
    record = make_raw()
    assert RawNodeRecord(**record.to_dict()) == record


def test_health_factors_to_dict():
    factors = HealthFactors(uptime=1.0, recency=2.0, storage=3.0, version=4.0)
    assert factors.to_dict() == {
        "uptime": 1.0,
        "recency": 2.0,
        "storage": 3.0,
        "version": 4.0,
    }


def test_status_values():
    assert [status.value for status in NodeStatus] == ["online", "degraded", "offline"]
