"""Behavioral insight and recommendation generation.

Each rule fires independently; every applicable insight or recommendation
is emitted in rule order. Confidence values are fixed per rule.
"""

from collections.abc import Sequence

from ._consistency import is_focus_event
from ._types import (
    EventType,
    Insight,
    InsightType,
    ObjectDetectionData,
    Priority,
    ProctoringEvent,
    Recommendation,
    RecommendationType,
    RiskLevel,
    TemporalAnalysis,
)

_FOCUS_SHIFT_MIN_EVENTS = 6
_RECOMMEND_REVIEW_BELOW = 70
_UNNAMED_OBJECT = "unidentified object"

FOCUS_PATTERN_CONFIDENCE = 0.85
ATTENTION_DECLINE_CONFIDENCE = 0.78
CLUSTERING_CONFIDENCE = 0.82
UNAUTHORIZED_OBJECTS_CONFIDENCE = 0.95


def detected_object_names(events: Sequence[ProctoringEvent]) -> list[str]:
    """Unique object names from ``object-detected`` events, first-seen order."""
    names: dict[str, None] = {}
    for event in events:
        if event.event_type != EventType.OBJECT_DETECTED:
            continue
        data = event.event_data
        if isinstance(data, ObjectDetectionData) and data.object_type:
            names.setdefault(data.object_type, None)
    return list(names)


def generate_behavior_insights(
    events: Sequence[ProctoringEvent],
    temporal: TemporalAnalysis,
) -> list[Insight]:
    insights: list[Insight] = []

    if sum(1 for e in events if is_focus_event(e)) >= _FOCUS_SHIFT_MIN_EVENTS:
        insights.append(Insight(
            type=InsightType.FOCUS_PATTERN,
            message=(
                "Candidate shows frequent focus shifts, indicating possible "
                "distraction or nervousness"
            ),
            confidence=FOCUS_PATTERN_CONFIDENCE,
        ))

    if temporal.attention_decline:
        insights.append(Insight(
            type=InsightType.ATTENTION_DECLINE,
            message="Attention appears to decline over time, suggesting fatigue or disengagement",
            confidence=ATTENTION_DECLINE_CONFIDENCE,
        ))

    if temporal.violation_clusters:
        insights.append(Insight(
            type=InsightType.BEHAVIOR_CLUSTERING,
            message=(
                "Violations occur in clusters, suggesting specific trigger "
                "moments or stress periods"
            ),
            confidence=CLUSTERING_CONFIDENCE,
        ))

    if any(e.event_type == EventType.OBJECT_DETECTED for e in events):
        names = detected_object_names(events) or [_UNNAMED_OBJECT]
        insights.append(Insight(
            type=InsightType.UNAUTHORIZED_OBJECTS,
            message=f"Detected unauthorized items: {', '.join(names)}",
            confidence=UNAUTHORIZED_OBJECTS_CONFIDENCE,
        ))

    return insights


def generate_recommendations(
    integrity_score: int,
    risk_level: RiskLevel,
    insights: Sequence[Insight],
) -> list[Recommendation]:
    """Derive prioritized follow-up actions for the interviewer."""
    recommendations: list[Recommendation] = []

    if integrity_score < _RECOMMEND_REVIEW_BELOW:
        recommendations.append(Recommendation(
            type=RecommendationType.INTEGRITY_CONCERN,
            action="Consider additional verification or follow-up interview",
            priority=Priority.HIGH,
        ))

    if risk_level == RiskLevel.CRITICAL:
        recommendations.append(Recommendation(
            type=RecommendationType.IMMEDIATE_ACTION,
            action="Immediate intervention required - contact candidate or pause interview",
            priority=Priority.CRITICAL,
        ))

    if any(i.type == InsightType.ATTENTION_DECLINE for i in insights):
        recommendations.append(Recommendation(
            type=RecommendationType.INTERVIEW_ADJUSTMENT,
            action="Consider shortening remaining interview time or providing a break",
            priority=Priority.MEDIUM,
        ))

    return recommendations
