"""Public entry points of the behavioral-integrity scoring engine.

Pipeline, run fresh on every call:
  1. Raw records are coerced into frozen ProctoringEvent snapshots and
     sorted by timestamp (_coercion.py). The caller's list is never touched.
  2. Temporal, frequency, and consistency analyses run over the sorted
     stream (_temporal.py, _frequency.py, _consistency.py).
  3. The three analyses are fused into one integrity score and a risk level
     (_fusion.py).
  4. Insights and recommendations are derived from the same inputs
     (_insights.py); confidence comes from data sufficiency (_confidence.py).

Every function here is pure: no module-level state, no I/O. Callers (HTTP
handlers, socket loops) own timeouts, retries, and persistence, and may
pass their own LatencyTracker to collect per-stage timings.
"""

import logging
import time
from collections.abc import Iterable, Sequence
from contextlib import AbstractContextManager, nullcontext
from datetime import datetime, timezone
from typing import Any

from ._coercion import EventLike, coerce_duration, coerce_events
from ._confidence import assess_data_sufficiency
from ._consistency import analyze_behavioral_consistency
from ._event_stats import event_type_stats, events_per_minute, severity_breakdown
from ._explainability import ScoreBreakdown, explain_fusion
from ._frequency import analyze_violation_frequency
from ._fusion import assess_risk_level, fuse_integrity_score
from ._insights import generate_behavior_insights, generate_recommendations
from ._legacy import (
    LegacySummary,
    calculate_legacy_score,
    legacy_review_notes,
    resolve_integrity_score,
    summarize_session,
)
from ._predictor import predict_next_violation
from ._report import MODEL_VERSION, IntegrityReport, LiveMonitorSnapshot
from ._telemetry import LatencyTracker
from ._temporal import analyze_temporal_patterns
from ._types import (
    BehavioralAnalysisResult,
    ConsistencyAnalysis,
    FrequencyAnalysis,
    ProctoringEvent,
    RiskLevel,
    TemporalAnalysis,
)

logger = logging.getLogger(__name__)

_NEUTRAL_SCORE = 100
_TOP_INSIGHTS = 3


def _stage(tracker: LatencyTracker | None, name: str) -> AbstractContextManager[Any]:
    if tracker is None:
        return nullcontext()
    return tracker.measure(name)


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def _run_analyses(
    events: Sequence[ProctoringEvent],
    duration_s: float,
    tracker: LatencyTracker | None,
) -> tuple[TemporalAnalysis, FrequencyAnalysis, ConsistencyAnalysis]:
    with _stage(tracker, "temporal_analysis"):
        temporal = analyze_temporal_patterns(events, duration_s)
    with _stage(tracker, "frequency_analysis"):
        frequency = analyze_violation_frequency(events)
    with _stage(tracker, "consistency_analysis"):
        consistency = analyze_behavioral_consistency(events)
    return temporal, frequency, consistency


def analyze_behavior(
    events: Iterable[EventLike] | None,
    duration_s: Any,
    *,
    tracker: LatencyTracker | None = None,
) -> BehavioralAnalysisResult:
    """Score one interview session from its proctoring events.

    Args:
        events: Event records for a single session, in any order. Mappings
            use the wire names (``eventType``, ``eventData``) or snake_case.
        duration_s: Total session duration in seconds.
        tracker: Optional caller-owned latency tracker.

    Returns:
        BehavioralAnalysisResult. An empty stream or a non-positive duration
        yields the neutral result: score 100, risk low, no insights, and no
        recommendations.

    Raises:
        EventContractError: If a record or the duration cannot be coerced.
    """
    with _stage(tracker, "end_to_end"):
        with _stage(tracker, "coercion"):
            ordered = coerce_events(events)
            duration = coerce_duration(duration_s)

        sufficiency = assess_data_sufficiency(len(ordered), duration)
        if sufficiency.warnings:
            logger.info("Data sufficiency: %s", sufficiency.warning_message)

        if not ordered or duration <= 0:
            return BehavioralAnalysisResult(
                integrity_score=_NEUTRAL_SCORE,
                risk_level=RiskLevel.LOW,
                behavior_insights=[],
                recommended_actions=[],
                confidence_level=sufficiency.confidence_level,
            )

        temporal, frequency, consistency = _run_analyses(ordered, duration, tracker)

        with _stage(tracker, "fusion"):
            integrity_score = fuse_integrity_score(temporal, frequency, consistency)
            risk_level = assess_risk_level(integrity_score, ordered)

        with _stage(tracker, "insights"):
            insights = generate_behavior_insights(ordered, temporal)
            recommendations = generate_recommendations(integrity_score, risk_level, insights)

    logger.info(
        "Behavioral analysis: events=%d score=%d risk=%s confidence=%.2f insights=%d",
        len(ordered),
        integrity_score,
        risk_level.value,
        sufficiency.confidence_level,
        len(insights),
    )

    return BehavioralAnalysisResult(
        integrity_score=integrity_score,
        risk_level=risk_level,
        behavior_insights=insights,
        recommended_actions=recommendations,
        confidence_level=sufficiency.confidence_level,
    )


def explain_score(events: Iterable[EventLike] | None, duration_s: Any) -> ScoreBreakdown:
    """Break the integrity score of a session down into its fusion terms.

    The neutral case (no events or non-positive duration) is explained from
    empty analyses, so the breakdown always agrees with analyze_behavior.
    """
    ordered = coerce_events(events)
    duration = coerce_duration(duration_s)
    if not ordered or duration <= 0:
        return explain_fusion(TemporalAnalysis(), FrequencyAnalysis(), ConsistencyAnalysis())
    return explain_fusion(*_run_analyses(ordered, duration, None))


def build_live_snapshot(
    events: Iterable[EventLike] | None,
    elapsed_s: Any,
    *,
    now: datetime | None = None,
    recent_limit: int = 10,
    tracker: LatencyTracker | None = None,
) -> LiveMonitorSnapshot:
    """Everything the live dashboard shows for an interview in progress.

    Called repeatedly with a growing event list. The full analysis runs over
    every event up to ``now``; the prediction only looks at the
    ``recent_limit`` most recent of those. Events stamped after ``now`` are
    left out of both.

    Args:
        events: Session events received so far, any order.
        elapsed_s: Seconds since the interview started.
        now: Current time; defaults to the wall clock in UTC.
        recent_limit: Number of most recent events fed to the predictor.
        tracker: Optional caller-owned latency tracker.
    """
    now = _utc(now)
    ordered = [e for e in coerce_events(events) if e.timestamp <= now]
    analysis = analyze_behavior(ordered, elapsed_s, tracker=tracker)

    recent = ordered[max(len(ordered) - recent_limit, 0):]
    with _stage(tracker, "prediction"):
        prediction = predict_next_violation(recent, now=now)

    return LiveMonitorSnapshot(
        integrity_score=analysis.integrity_score,
        risk_level=analysis.risk_level,
        confidence_level=analysis.confidence_level,
        top_insights=analysis.behavior_insights[:_TOP_INSIGHTS],
        prediction=prediction,
        total_events=len(ordered),
        generated_at=now,
    )


def generate_report(
    events: Iterable[EventLike] | None,
    duration_s: Any,
    candidate_name: str,
    *,
    legacy_summary: LegacySummary | None = None,
    now: datetime | None = None,
) -> IntegrityReport:
    """Build the end-of-interview integrity report.

    Args:
        events: All events of the session, any order.
        duration_s: Total session duration in seconds.
        candidate_name: Candidate display name for the report header.
        legacy_summary: Counters already persisted on the session record.
            Recomputed from the events when omitted.
        now: Report generation time; defaults to the wall clock in UTC.

    Returns:
        IntegrityReport whose ``integrity_score`` is the behavioral score,
        with the legacy score kept alongside.
    """
    start = time.perf_counter()
    ordered = coerce_events(events)
    duration = coerce_duration(duration_s)

    analysis = analyze_behavior(ordered, duration)
    summary = legacy_summary if legacy_summary is not None else summarize_session(ordered, duration)
    legacy_score = calculate_legacy_score(summary)
    resolved = resolve_integrity_score(analysis, legacy_score)

    review_notes = []
    if not analysis.recommended_actions:
        review_notes = legacy_review_notes(legacy_score, summary)

    report = IntegrityReport(
        candidate=candidate_name,
        duration_s=duration,
        generated_at=_utc(now),
        model_version=MODEL_VERSION,
        total_events=len(ordered),
        analysis=analysis,
        integrity_score=resolved if resolved is not None else analysis.integrity_score,
        legacy_summary=summary,
        legacy_score=legacy_score,
        review_notes=review_notes,
        events_per_minute=events_per_minute(len(ordered), duration),
        severity_breakdown=severity_breakdown(ordered),
        processing_time_ms=round((time.perf_counter() - start) * 1000.0, 3),
        event_stats=event_type_stats(ordered),
    )

    logger.info(
        "Report generated for %s: score=%d legacy=%d events=%d",
        candidate_name,
        report.integrity_score,
        legacy_score,
        report.total_events,
    )
    return report
