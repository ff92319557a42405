"""
Health scoring for pNodes.

A health score combines four 0-100 sub-scores:

- recency: linear decay from 100 at elapsed 0 to 0 at the offline threshold
- uptime: linear growth saturating at the uptime ceiling
- storage: 100 inside the sweet-spot utilization band, falling linearly
  toward a floor score as utilization moves away from the band on either side
- version: 100 on the fleet's canonical version, a fixed lower score otherwise

The version sub-score is fleet-relative, so every scoring call takes a
``FleetContext`` computed once over the whole node set.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from pnode_analytics.core.classifier import elapsed_since
from pnode_analytics.core.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from pnode_analytics.core.formatting import clamp
from pnode_analytics.datastructures.node_types import (
    HealthFactors,
    NodeStatus,
    RawNodeRecord,
)
from pnode_analytics.datastructures.type_aliases import (
    DurationSeconds,
    HealthScoreValue,
    Percentage,
    SubScore,
    Timestamp,
    VersionString,
)

MAX_SCORE: SubScore = 100.0
MIN_SCORE: SubScore = 0.0

HEALTH_SCORE_LABELS: tuple[tuple[int, str], ...] = (
    (90, "Excellent"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Fair"),
    (50, "Poor"),
)


@dataclass(frozen=True, slots=True)
class FleetContext:
    """Fleet-wide information needed to score one node relative to the rest."""

    canonical_version: VersionString | None = None
    version_counts: dict[VersionString, int] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        records: Iterable[RawNodeRecord],
        pinned_version: VersionString | None = None,
    ) -> FleetContext:
        """Count versions and pick the canonical one.

        The canonical version is ``pinned_version`` when given, otherwise the
        most common non-empty version; ties go to the version seen first.
        """
        counts = Counter(record.version for record in records)
        canonical = pinned_version
        if canonical is None:
            for version, _ in counts.most_common():
                if version:
                    canonical = version
                    break
        return cls(canonical_version=canonical, version_counts=dict(counts))


def recency_score(
    elapsed: DurationSeconds, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> SubScore:
    if math.isnan(elapsed):
        return MIN_SCORE
    horizon = config.thresholds.degraded_seconds
    if horizon <= 0:
        return MAX_SCORE if elapsed <= 0 else MIN_SCORE
    return clamp(MAX_SCORE * (1.0 - max(elapsed, 0.0) / horizon), MIN_SCORE, MAX_SCORE)


def uptime_score(
    uptime: DurationSeconds, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> SubScore:
    if math.isnan(uptime):
        return MIN_SCORE
    return clamp(
        uptime / config.uptime_ceiling_seconds * MAX_SCORE, MIN_SCORE, MAX_SCORE
    )


def storage_score(
    utilization: Percentage | None, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> SubScore:
    if utilization is None or math.isnan(utilization):
        return config.storage_neutral_score

    utilization = clamp(utilization, 0.0, 100.0)
    low, high = config.storage_band_low, config.storage_band_high
    floor = config.storage_floor_score

    if utilization < low:
        # low > 0 here since utilization >= 0
        return floor + (MAX_SCORE - floor) * (utilization / low)
    if utilization > high:
        # high < 100 here since utilization <= 100
        return MAX_SCORE - (MAX_SCORE - floor) * ((utilization - high) / (100.0 - high))
    return MAX_SCORE


def version_score(
    version: VersionString | None,
    fleet: FleetContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> SubScore:
    canonical = config.pinned_version or fleet.canonical_version
    if version and canonical and version == canonical:
        return MAX_SCORE
    return config.version_mismatch_score


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def combine_factors(
    factors: HealthFactors, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> HealthScoreValue:
    """Weighted sum of the sub-scores, rounded and clamped to [0, 100]."""
    weights = config.weights
    weighted = (
        factors.uptime * weights.uptime
        + factors.recency * weights.recency
        + factors.storage * weights.storage
        + factors.version * weights.version
    )
    if math.isnan(weighted):
        return 0
    return int(clamp(round_half_up(weighted), MIN_SCORE, MAX_SCORE))


def calculate_health_factors(
    record: RawNodeRecord,
    *,
    now: Timestamp,
    fleet: FleetContext,
    status: NodeStatus | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> HealthFactors:
    """The four sub-scores of ``record`` as of ``now``.

    ``status`` is the already-classified status when the caller has one; an
    offline node always has zero recency.
    """
    elapsed = elapsed_since(record.last_seen_timestamp, now)
    recency = recency_score(elapsed, config)
    if status is NodeStatus.OFFLINE:
        recency = MIN_SCORE

    return HealthFactors(
        uptime=uptime_score(record.uptime, config),
        recency=recency,
        storage=storage_score(record.utilization_percent, config),
        version=version_score(record.version, fleet, config),
    )


def calculate_health_score(
    record: RawNodeRecord,
    *,
    now: Timestamp,
    fleet: FleetContext,
    status: NodeStatus | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> HealthScoreValue:
    """Composite 0-100 health score of ``record`` as of ``now``."""
    factors = calculate_health_factors(
        record, now=now, fleet=fleet, status=status, config=config
    )
    return combine_factors(factors, config)


def health_score_label(score: float) -> str:
    for minimum, label in HEALTH_SCORE_LABELS:
        if score >= minimum:
            return label
    return "Critical"


@dataclass(frozen=True, slots=True)
class HealthScorer:
    """Health scoring bound to one ``ScoringConfig``."""

    config: ScoringConfig = DEFAULT_SCORING_CONFIG

    def fleet_context(self, records: Iterable[RawNodeRecord]) -> FleetContext:
        return FleetContext.from_records(records, self.config.pinned_version)

    def factors(
        self,
        record: RawNodeRecord,
        *,
        now: Timestamp,
        fleet: FleetContext,
        status: NodeStatus | None = None,
    ) -> HealthFactors:
        return calculate_health_factors(
            record, now=now, fleet=fleet, status=status, config=self.config
        )

    def score(
        self,
        record: RawNodeRecord,
        *,
        now: Timestamp,
        fleet: FleetContext,
        status: NodeStatus | None = None,
    ) -> HealthScoreValue:
        return calculate_health_score(
            record, now=now, fleet=fleet, status=status, config=self.config
        )
