"""Score fusion and risk classification.

Fusion design:
- Temporal findings subtract fixed penalties (attention decline, repeated
  clustering, stress episodes).
- The frequency and consistency sub-scores subtract in proportion to how far
  each falls below 100.
- A small adjustment rewards low violation diversity and penalizes heavy
  clustering.
- The result is rounded half-up and clamped to [0, 100].
"""

import math
from collections.abc import Sequence

from ._types import (
    ConsistencyAnalysis,
    FrequencyAnalysis,
    ProctoringEvent,
    RiskLevel,
    TemporalAnalysis,
)
from ._weights import RISK_CRITICAL_EVENT_TYPES

ATTENTION_DECLINE_PENALTY = 15.0
CLUSTER_PENALTY = 10.0
STRESS_PATTERN_PENALTY = 5.0
FREQUENCY_FACTOR = 0.6
CONSISTENCY_FACTOR = 0.3
LOW_DIVERSITY_BONUS = 2.0
HEAVY_CLUSTERING_PENALTY = 3.0

_CLUSTER_PENALTY_MIN = 3        # more than 2 clusters
_HEAVY_CLUSTERING_MIN = 4       # more than 3 clusters
_LOW_DIVERSITY_MAX = 2          # fewer than 3 distinct types

_CRITICAL_SCORE = 50
_HIGH_SCORE = 70
_MEDIUM_SCORE = 85
_CRITICAL_COUNT_LIMIT = 3
_HIGH_COUNT_LIMIT = 1


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def fusion_terms(
    temporal: TemporalAnalysis,
    frequency: FrequencyAnalysis,
    consistency: ConsistencyAnalysis,
) -> dict[str, float]:
    """Signed contribution of each fusion term, keyed by term name.

    Negative values are deductions from the base score of 100.
    """
    clusters = len(temporal.violation_clusters)
    return {
        "attention_decline": -ATTENTION_DECLINE_PENALTY if temporal.attention_decline else 0.0,
        "violation_clusters": -CLUSTER_PENALTY if clusters >= _CLUSTER_PENALTY_MIN else 0.0,
        "stress_patterns": -STRESS_PATTERN_PENALTY if temporal.stress_patterns else 0.0,
        "frequency": -(100.0 - clamp_score(frequency.frequency_score)) * FREQUENCY_FACTOR,
        "consistency": -(100.0 - clamp_score(consistency.overall_consistency)) * CONSISTENCY_FACTOR,
        "low_diversity": (
            LOW_DIVERSITY_BONUS if frequency.violation_diversity <= _LOW_DIVERSITY_MAX else 0.0
        ),
        "heavy_clustering": (
            -HEAVY_CLUSTERING_PENALTY if clusters >= _HEAVY_CLUSTERING_MIN else 0.0
        ),
    }


def fuse_integrity_score(
    temporal: TemporalAnalysis,
    frequency: FrequencyAnalysis,
    consistency: ConsistencyAnalysis,
) -> int:
    """Combine the three analyses into one integrity score in [0, 100]."""
    base = 100.0
    for term in fusion_terms(temporal, frequency, consistency).values():
        base += term
    return min(max(round_half_up(base), 0), 100)


def count_risk_critical(events: Sequence[ProctoringEvent]) -> int:
    return sum(1 for e in events if e.event_type in RISK_CRITICAL_EVENT_TYPES)


def assess_risk_level(integrity_score: float, events: Sequence[ProctoringEvent]) -> RiskLevel:
    """Map an integrity score and critical-event count to a risk level.

    Rules are checked in order and the first match wins, so a strong score
    cannot hide repeated unauthorized objects or extra faces.
    """
    critical_count = count_risk_critical(events)

    if integrity_score < _CRITICAL_SCORE or critical_count > _CRITICAL_COUNT_LIMIT:
        return RiskLevel.CRITICAL
    if integrity_score < _HIGH_SCORE or critical_count > _HIGH_COUNT_LIMIT:
        return RiskLevel.HIGH
    if integrity_score < _MEDIUM_SCORE:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
