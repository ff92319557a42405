"""
Node datastructures for pNode telemetry.

A pNode is reported by the pRPC ``get-pods-with-stats`` method as a flat JSON
object. ``RawNodeRecord`` is the immutable, type-coerced form of one such
object; ``AnnotatedNode`` is the same record enriched with the derived
status, health score and display strings.

Both are frozen: a refresh produces new values instead of mutating old ones.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any

from .type_aliases import (
    ByteCount,
    HealthScoreValue,
    HostAddress,
    JsonDict,
    NodeAddress,
    NodePubkey,
    Percentage,
    PortNumber,
    SubScore,
    Timestamp,
    VersionString,
)

DEFAULT_RPC_PORT: PortNumber = 6000


class NodeStatus(Enum):
    """Liveness of a node, derived purely from staleness."""

    ONLINE = "online"
    DEGRADED = "degraded"
    OFFLINE = "offline"


def _coerce_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _coerce_int(value: Any, default: int = 0) -> int:
    return int(_coerce_float(value, float(default)))


def _coerce_bool(value: Any, default: bool = False) -> bool:
    """Real booleans pass through; only an explicit "true" string is True."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return default


def _coerce_optional_percent(value: Any) -> Percentage | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


@dataclass(frozen=True, slots=True)
class RawNodeRecord:
    """One pNode as reported by pRPC, with nullable fields already defaulted."""

    address: NodeAddress
    last_seen_timestamp: Timestamp
    pubkey: NodePubkey
    is_public: bool = False
    rpc_port: PortNumber = DEFAULT_RPC_PORT
    storage_committed: ByteCount = 0
    storage_usage_percent: Percentage | None = None
    storage_used: ByteCount = 0
    uptime: float = 0.0
    version: VersionString = ""

    @classmethod
    def from_dict(cls, payload: JsonDict) -> RawNodeRecord:
        """Build a record from a pRPC pod object.

        Raises ValueError when one of the identifying fields (pubkey,
        address, last_seen_timestamp) is missing; everything else degrades
        to a default.
        """
        pubkey = payload.get("pubkey")
        address = payload.get("address")
        last_seen = payload.get("last_seen_timestamp")
        if not pubkey or not address or last_seen is None:
            raise ValueError(
                "Pod record requires pubkey, address and last_seen_timestamp"
            )

        version = payload.get("version")
        return cls(
            address=str(address),
            last_seen_timestamp=_coerce_float(last_seen, math.nan),
            pubkey=str(pubkey),
            is_public=_coerce_bool(payload.get("is_public")),
            rpc_port=_coerce_int(payload.get("rpc_port"), DEFAULT_RPC_PORT),
            storage_committed=_coerce_int(payload.get("storage_committed")),
            storage_usage_percent=_coerce_optional_percent(
                payload.get("storage_usage_percent")
            ),
            storage_used=_coerce_int(payload.get("storage_used")),
            uptime=_coerce_float(payload.get("uptime")),
            version=str(version) if version is not None else "",
        )

    @property
    def utilization_percent(self) -> Percentage | None:
        """Storage utilization in percent, or None when it cannot be known."""
        if self.storage_usage_percent is not None and math.isfinite(
            self.storage_usage_percent
        ):
            return self.storage_usage_percent
        if self.storage_committed > 0:
            return self.storage_used / self.storage_committed * 100.0
        return None

    def to_dict(self) -> JsonDict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True, slots=True)
class HealthFactors:
    """Individual 0-100 sub-scores behind a health score."""

    uptime: SubScore
    recency: SubScore
    storage: SubScore
    version: SubScore

    def to_dict(self) -> dict[str, float]:
        return {
            "uptime": self.uptime,
            "recency": self.recency,
            "storage": self.storage,
            "version": self.version,
        }


_RAW_FIELD_NAMES = tuple(f.name for f in fields(RawNodeRecord))


@dataclass(frozen=True, slots=True)
class AnnotatedNode:
    """A RawNodeRecord plus every field derived from it."""

    # Raw fields
    address: NodeAddress
    last_seen_timestamp: Timestamp
    pubkey: NodePubkey
    is_public: bool
    rpc_port: PortNumber
    storage_committed: ByteCount
    storage_usage_percent: Percentage | None
    storage_used: ByteCount
    uptime: float
    version: VersionString

    # Derived fields
    id: NodePubkey
    ip: HostAddress
    gossip_port: PortNumber
    status: NodeStatus
    health_score: HealthScoreValue
    last_seen_date: datetime
    storage_committed_formatted: str
    storage_used_formatted: str
    uptime_formatted: str

    @property
    def raw(self) -> RawNodeRecord:
        """The record this node was derived from."""
        return RawNodeRecord(**{name: getattr(self, name) for name in _RAW_FIELD_NAMES})

    @property
    def utilization_percent(self) -> Percentage | None:
        return self.raw.utilization_percent

    def to_dict(self) -> JsonDict:
        """JSON-ready mapping (enum as value, datetime as ISO-8601)."""
        result: JsonDict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, NodeStatus):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            result[f.name] = value
        return result
