"""Score explainability and audit log generation.

Breaks an integrity score down into the fusion terms that produced it so
that reviewers can see which behavior cost the candidate points. Terms
are the same ones applied by _fusion.py; nothing is re-weighted here.
"""

import logging
from dataclasses import dataclass

from ._fusion import fuse_integrity_score, fusion_terms
from ._types import ConsistencyAnalysis, FrequencyAnalysis, TemporalAnalysis

logger = logging.getLogger(__name__)


@dataclass
class ScoreContribution:
    """Contribution of a single fusion term to the final score.

    Attributes:
        term: Machine-readable term identifier.
        points: Signed points applied to the base score of 100.
        percent_of_deductions: Share of all deducted points this term explains.
    """

    term: str
    points: float
    percent_of_deductions: float


@dataclass
class ScoreBreakdown:
    """Explainability output for one analysis.

    Attributes:
        integrity_score: Final clamped score.
        raw_score: Unclamped, unrounded score before clamping.
        contributions: Non-zero terms, largest magnitude first.
        audit_log: Structured record of the sub-scores behind the terms.
    """

    integrity_score: int
    raw_score: float
    contributions: list[ScoreContribution]
    audit_log: dict[str, object]


def explain_fusion(
    temporal: TemporalAnalysis,
    frequency: FrequencyAnalysis,
    consistency: ConsistencyAnalysis,
) -> ScoreBreakdown:
    """Explain how the three analyses combined into the integrity score."""
    terms = fusion_terms(temporal, frequency, consistency)

    raw = 100.0
    for points in terms.values():
        raw += points
    total_deducted = sum(-p for p in terms.values() if p < 0)

    contributions: list[ScoreContribution] = []
    for term, points in terms.items():
        if points == 0:
            continue
        share = 0.0
        if points < 0 and total_deducted > 1e-9:
            share = round(-points / total_deducted * 100.0, 2)
        contributions.append(ScoreContribution(
            term=term,
            points=round(points, 4),
            percent_of_deductions=share,
        ))
    contributions.sort(key=lambda c: abs(c.points), reverse=True)

    audit_log: dict[str, object] = {
        "phase_counts": {
            "early": temporal.early_violations,
            "mid": temporal.mid_violations,
            "late": temporal.late_violations,
        },
        "cluster_count": len(temporal.violation_clusters),
        "stress_pattern_count": len(temporal.stress_patterns),
        "frequency_score": frequency.frequency_score,
        "critical_violations": frequency.critical_violations,
        "violation_diversity": frequency.violation_diversity,
        "focus_consistency": round(consistency.focus_consistency, 4),
        "behavior_stability": round(consistency.behavior_stability, 4),
        "overall_consistency": round(consistency.overall_consistency, 4),
    }

    return ScoreBreakdown(
        integrity_score=fuse_integrity_score(temporal, frequency, consistency),
        raw_score=round(raw, 4),
        contributions=contributions,
        audit_log=audit_log,
    )
