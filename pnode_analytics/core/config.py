"""
Configuration for pnode_analytics.

Every tunable parameter of the derivation core lives here: staleness
thresholds, health weights, the uptime ceiling and the storage sweet-spot
band. The algorithms receive these structures as arguments and never read
literals of their own, so alternate tunings need no code changes.

Settings files are TOML or JSON with everything under a ``pnode_analytics``
table::

    [pnode_analytics]
    log_level = "DEBUG"

    [pnode_analytics.thresholds]
    online_seconds = 120
    degraded_seconds = 300

    [pnode_analytics.weights]
    uptime = 0.30
    recency = 0.35
    storage = 0.20
    version = 0.15
"""

from __future__ import annotations

import json
import math
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pnode_analytics.datastructures.type_aliases import (
    DurationSeconds,
    Percentage,
    ScoreWeight,
    SubScore,
    UrlString,
    VersionString,
)

SETTINGS_SECTION = "pnode_analytics"

THIRTY_DAYS_SECONDS: DurationSeconds = 30 * 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class StatusThresholds:
    """Staleness bands, in seconds since the node was last seen."""

    online_seconds: DurationSeconds = 300.0
    degraded_seconds: DurationSeconds = 900.0

    def __post_init__(self) -> None:
        if self.online_seconds < 0:
            raise ValueError("online_seconds must be non-negative")
        if self.degraded_seconds < self.online_seconds:
            raise ValueError("degraded_seconds must be >= online_seconds")


@dataclass(frozen=True, slots=True)
class HealthWeights:
    """Weights of the four sub-scores; they must sum to 1.0."""

    uptime: ScoreWeight = 0.35
    recency: ScoreWeight = 0.35
    storage: ScoreWeight = 0.20
    version: ScoreWeight = 0.10

    def __post_init__(self) -> None:
        weights = (self.uptime, self.recency, self.storage, self.version)
        if any(weight < 0 for weight in weights):
            raise ValueError("Health weights must be non-negative")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-9):
            raise ValueError(f"Health weights must sum to 1.0, got {sum(weights)}")


@dataclass(frozen=True, slots=True)
class ScoringConfig:
    """Curve parameters for the health sub-scores."""

    thresholds: StatusThresholds = field(default_factory=StatusThresholds)
    weights: HealthWeights = field(default_factory=HealthWeights)
    uptime_ceiling_seconds: DurationSeconds = THIRTY_DAYS_SECONDS
    storage_band_low: Percentage = 40.0
    storage_band_high: Percentage = 70.0
    storage_floor_score: SubScore = 20.0
    storage_neutral_score: SubScore = 50.0
    version_mismatch_score: SubScore = 50.0
    # Overrides the fleet majority as the canonical version when set
    pinned_version: VersionString | None = None

    def __post_init__(self) -> None:
        if self.uptime_ceiling_seconds <= 0:
            raise ValueError("uptime_ceiling_seconds must be positive")
        if not 0.0 <= self.storage_band_low <= self.storage_band_high <= 100.0:
            raise ValueError(
                "Storage band must satisfy 0 <= storage_band_low <= storage_band_high <= 100"
            )
        for name in (
            "storage_floor_score",
            "storage_neutral_score",
            "version_mismatch_score",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be within [0, 100]")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ScoringConfig:
        values = _known_fields(cls, payload, exclude={"thresholds", "weights"})
        if "thresholds" in payload:
            values["thresholds"] = StatusThresholds(
                **_known_fields(StatusThresholds, payload["thresholds"])
            )
        if "weights" in payload:
            values["weights"] = HealthWeights(
                **_known_fields(HealthWeights, payload["weights"])
            )
        return cls(**values)


@dataclass(frozen=True, slots=True)
class PRPCSettings:
    """Transport settings for the pRPC client."""

    endpoint: UrlString = "http://45.151.122.71:6000/rpc"
    fallback_endpoints: tuple[UrlString, ...] = (
        "http://192.190.136.36:6000/rpc",
        "http://62.171.135.107:6000/rpc",
        "http://173.212.207.32:6000/rpc",
    )
    timeout_seconds: DurationSeconds = 10.0
    retries: int = 3
    retry_delay_seconds: DurationSeconds = 1.0
    pods_cache_ttl_seconds: DurationSeconds = 60.0
    stats_cache_ttl_seconds: DurationSeconds = 30.0
    version_cache_ttl_seconds: DurationSeconds = 300.0

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.retries < 1:
            raise ValueError("retries must be at least 1")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be non-negative")

    @property
    def endpoints(self) -> tuple[UrlString, ...]:
        """Primary endpoint followed by the fallbacks, in order of preference."""
        return (self.endpoint, *self.fallback_endpoints)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PRPCSettings:
        values = _known_fields(cls, payload)
        if "fallback_endpoints" in values:
            values["fallback_endpoints"] = _as_tuple(values["fallback_endpoints"])
        return cls(**values)


@dataclass(frozen=True, slots=True)
class AnalyticsSettings:
    """Top-level settings: scoring, transport and logging."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    prpc: PRPCSettings = field(default_factory=PRPCSettings)
    log_level: str = "INFO"
    log_debug_scopes: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> AnalyticsSettings:
        """Build settings from a plain mapping, ignoring unknown keys.

        ``thresholds`` and ``weights`` may appear either at the top level or
        inside ``scoring``.
        """
        scoring_payload = dict(payload.get("scoring") or {})
        for key in ("thresholds", "weights"):
            if key in payload:
                scoring_payload.setdefault(key, payload[key])

        values: dict[str, Any] = {
            "scoring": ScoringConfig.from_dict(scoring_payload),
            "prpc": PRPCSettings.from_dict(payload.get("prpc") or {}),
        }
        if "log_level" in payload:
            values["log_level"] = str(payload["log_level"])
        if "log_debug_scopes" in payload:
            values["log_debug_scopes"] = _as_tuple(payload["log_debug_scopes"])
        return cls(**values)

    @classmethod
    def from_toml(cls, path: Path) -> AnalyticsSettings:
        with Path(path).open("rb") as handle:
            document = tomllib.load(handle)
        return cls.from_dict(document.get(SETTINGS_SECTION, document))

    @classmethod
    def from_json(cls, path: Path) -> AnalyticsSettings:
        document = json.loads(Path(path).read_text())
        return cls.from_dict(document.get(SETTINGS_SECTION, document))

    @classmethod
    def from_path(cls, path: Path) -> AnalyticsSettings:
        """Load settings, choosing the parser from the file suffix."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix == ".toml":
            return cls.from_toml(path)
        if suffix == ".json":
            return cls.from_json(path)
        raise ValueError(f"Unsupported settings file type: {path.suffix or path.name}")


DEFAULT_SCORING_CONFIG = ScoringConfig()


def _known_fields(
    cls: type, payload: Mapping[str, Any], exclude: Iterable[str] = ()
) -> dict[str, Any]:
    excluded = set(exclude)
    names = {f.name for f in fields(cls)} - excluded
    return {key: value for key, value in payload.items() if key in names}


def _as_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)
