"""Behavioral-integrity scoring engine for proctored video interviews.

Turns a session's stream of classified proctoring events (focus loss, face
absence, extra faces, unauthorized objects, background audio, ...) into an
integrity score, a risk level, insights, recommended actions, and a
short-horizon prediction for live dashboards.

Entry points:
  analyze_behavior        — full analysis of one session (pure function)
  predict_next_violation  — next-violation estimate over recent events
  build_live_snapshot     — what the live interviewer dashboard shows
  generate_report         — end-of-interview report (JSON / Markdown)
  explain_score           — fusion-term breakdown and audit log

Analysis components:
  analyze_temporal_patterns       — interview phases and violation clusters
  analyze_violation_frequency     — per-type penalties and repeated sequences
  analyze_behavioral_consistency  — focus regularity and window stability
  fuse_integrity_score / assess_risk_level — score fusion and risk tiers
  calculate_legacy_score  — simpler rule-based score kept on the session record
  LatencyTracker          — per-stage latency budgeting with OTEL export

Example::

    from proctor_integrity import analyze_behavior, build_live_snapshot

    events = [
        {"timestamp": "2024-05-01T10:00:05Z", "eventType": "focus-lost"},
        {"timestamp": "2024-05-01T10:00:40Z", "eventType": "object-detected",
         "eventData": {"objectType": "cell phone"}},
    ]
    result = analyze_behavior(events, duration_s=1800)
    print(result.integrity_score, result.risk_level.value)

    snapshot = build_live_snapshot(events, elapsed_s=60)
    print(snapshot.prediction.type, snapshot.prediction.probability)
"""

from .analyzer import (
    analyze_behavior,
    build_live_snapshot,
    explain_score,
    generate_report,
    predict_next_violation,
)
from ._coercion import EventContractError, coerce_event, coerce_events
from ._confidence import DataSufficiency, assess_data_sufficiency, calculate_confidence_level
from ._consistency import analyze_behavioral_consistency
from ._event_stats import (
    EventTypeStats,
    critical_events,
    describe_event,
    event_timeline,
    event_type_stats,
    events_per_minute,
    severity_breakdown,
)
from ._explainability import ScoreBreakdown, ScoreContribution, explain_fusion
from ._frequency import analyze_violation_frequency, identify_repeated_patterns
from ._fusion import assess_risk_level, fuse_integrity_score
from ._insights import generate_behavior_insights, generate_recommendations
from ._legacy import (
    LegacySummary,
    ReviewNote,
    calculate_legacy_score,
    legacy_review_notes,
    resolve_integrity_score,
    summarize_session,
)
from ._report import (
    IntegrityReport,
    LiveMonitorSnapshot,
    report_to_json,
    report_to_markdown,
    snapshot_to_json,
)
from ._telemetry import LATENCY_BUDGETS_MS, LatencyTracker, StageStats
from ._temporal import analyze_temporal_patterns, detect_clusters
from ._types import (
    AudioLevelData,
    BehavioralAnalysisResult,
    BoundingBox,
    ConsistencyAnalysis,
    EventType,
    EyeClosureData,
    FaceCountData,
    FrequencyAnalysis,
    GenericEventData,
    Insight,
    InsightType,
    ObjectDetectionData,
    Prediction,
    Priority,
    ProctoringEvent,
    Recommendation,
    RecommendationType,
    RepeatedPattern,
    RiskLevel,
    Severity,
    StressPattern,
    TemporalAnalysis,
    ViolationCluster,
)

__all__ = [
    # Entry points
    "analyze_behavior",
    "build_live_snapshot",
    "explain_score",
    "generate_report",
    "predict_next_violation",
    # Coercion
    "EventContractError",
    "coerce_event",
    "coerce_events",
    # Analyses
    "analyze_behavioral_consistency",
    "analyze_temporal_patterns",
    "analyze_violation_frequency",
    "detect_clusters",
    "identify_repeated_patterns",
    # Fusion and risk
    "assess_risk_level",
    "fuse_integrity_score",
    # Insights
    "generate_behavior_insights",
    "generate_recommendations",
    # Confidence
    "DataSufficiency",
    "assess_data_sufficiency",
    "calculate_confidence_level",
    # Legacy scorer
    "LegacySummary",
    "ReviewNote",
    "calculate_legacy_score",
    "legacy_review_notes",
    "resolve_integrity_score",
    "summarize_session",
    # Explainability
    "ScoreBreakdown",
    "ScoreContribution",
    "explain_fusion",
    # Event statistics
    "EventTypeStats",
    "critical_events",
    "describe_event",
    "event_timeline",
    "event_type_stats",
    "events_per_minute",
    "severity_breakdown",
    # Reports
    "IntegrityReport",
    "LiveMonitorSnapshot",
    "report_to_json",
    "report_to_markdown",
    "snapshot_to_json",
    # Telemetry
    "LATENCY_BUDGETS_MS",
    "LatencyTracker",
    "StageStats",
    # Data types
    "AudioLevelData",
    "BehavioralAnalysisResult",
    "BoundingBox",
    "ConsistencyAnalysis",
    "EventType",
    "EyeClosureData",
    "FaceCountData",
    "FrequencyAnalysis",
    "GenericEventData",
    "Insight",
    "InsightType",
    "ObjectDetectionData",
    "Prediction",
    "Priority",
    "ProctoringEvent",
    "Recommendation",
    "RecommendationType",
    "RepeatedPattern",
    "RiskLevel",
    "Severity",
    "StressPattern",
    "TemporalAnalysis",
    "ViolationCluster",
]
