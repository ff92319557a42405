"""Pytest configuration and fixtures for pnode_analytics testing.

Every core test runs against a fixed clock so classification and scoring
are reproducible.
"""

from collections.abc import Callable
from typing import Any

import pytest

from pnode_analytics.datastructures.node_types import RawNodeRecord

FIXED_NOW = 1_700_000_000.0  # Fixed "current time" for deterministic tests
THIRTY_DAYS = 30 * 24 * 60 * 60


def build_raw(**overrides: Any) -> RawNodeRecord:
    """A healthy-looking record; any field can be overridden."""
    values: dict[str, Any] = {
        "address": "10.0.0.1:9001",
        "last_seen_timestamp": FIXED_NOW - 60,
        "pubkey": "PubKey1111111111111111111111111111111111111",
        "is_public": True,
        "rpc_port": 6000,
        "storage_committed": 1000,
        "storage_usage_percent": 50.0,
        "storage_used": 500,
        "uptime": float(THIRTY_DAYS),
        "version": "1.0.0",
    }
    values.update(overrides)
    return RawNodeRecord(**values)


@pytest.fixture
def now() -> float:
    return FIXED_NOW


@pytest.fixture
def make_raw() -> Callable[..., RawNodeRecord]:
    return build_raw


@pytest.fixture
def fleet_records() -> list[RawNodeRecord]:
    """Three nodes: online majority version, degraded, offline minority version."""
    return [
        build_raw(pubkey="AlphaKey", address="10.0.0.1:9001", version="1.0.0"),
        build_raw(
            pubkey="BravoKey",
            address="10.0.0.2:9001",
            last_seen_timestamp=FIXED_NOW - 600,
            uptime=3600.0,
            storage_committed=2000,
            storage_used=1900,
            storage_usage_percent=95.0,
            version="1.0.0",
        ),
        build_raw(
            pubkey="CharlieKey",
            address="192.168.1.7:9002",
            last_seen_timestamp=FIXED_NOW - 3600,
            uptime=0.0,
            storage_committed=0,
            storage_used=0,
            storage_usage_percent=None,
            version="0.9.0",
        ),
    ]
