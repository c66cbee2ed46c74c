"""Report envelope and live-monitor snapshot for consumers of the engine.

Consumers (report export, interviewer dashboard) read these as plain data.
Outputs as a typed dataclass, JSON string, or Markdown report.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime

from ._event_stats import EventTypeStats
from ._legacy import LegacySummary, ReviewNote
from ._types import BehavioralAnalysisResult, Insight, Prediction, RiskLevel

MODEL_VERSION = "1.0.0"


@dataclass(frozen=True)
class LiveMonitorSnapshot:
    """What the live interviewer dashboard shows on each poll.

    Attributes:
        integrity_score: Current integrity score over all events so far.
        risk_level: Current risk level.
        confidence_level: Analysis confidence in [0.5, 0.99].
        top_insights: At most three insights, in rule order.
        prediction: Next-violation estimate over the most recent events.
        total_events: Number of events analyzed.
        generated_at: Time the snapshot was taken.
    """

    integrity_score: int
    risk_level: RiskLevel
    confidence_level: float
    top_insights: list[Insight]
    prediction: Prediction
    total_events: int
    generated_at: datetime


@dataclass
class IntegrityReport:
    """Complete end-of-interview integrity report.

    ``integrity_score`` is the resolved score: the behavioral analysis score,
    with the legacy score kept alongside for the session record.
    ``event_stats`` is excluded from the default JSON output to avoid
    verbosity; call report_to_json(verbose=True) to include it.
    """

    candidate: str
    duration_s: float
    generated_at: datetime
    model_version: str
    total_events: int

    analysis: BehavioralAnalysisResult
    integrity_score: int

    legacy_summary: LegacySummary
    legacy_score: int
    review_notes: list[ReviewNote]

    events_per_minute: float
    severity_breakdown: dict[str, int]
    processing_time_ms: float

    event_stats: list[EventTypeStats] = field(default_factory=list)


def report_to_json(report: IntegrityReport, verbose: bool = False) -> str:
    """Serialize the report to a JSON string.

    Args:
        report: IntegrityReport to serialize.
        verbose: If True, includes per-type event statistics.

    Returns:
        JSON string.
    """
    d = dataclasses.asdict(report)
    if not verbose:
        d.pop("event_stats", None)
    return json.dumps(d, indent=2, default=str)


def snapshot_to_json(snapshot: LiveMonitorSnapshot) -> str:
    return json.dumps(dataclasses.asdict(snapshot), default=str)


def report_to_markdown(report: IntegrityReport) -> str:
    """Generate a human-readable Markdown report."""
    analysis = report.analysis
    lines = [
        f"# Interview Integrity Report — {report.candidate}",
        "",
        f"**Duration**: {report.duration_s:.0f}s",
        f"**Generated**: {report.generated_at.isoformat()}",
        f"**Model Version**: {report.model_version}",
        "",
        "## Integrity",
        f"- **Integrity Score**: {report.integrity_score}/100",
        f"- **Risk Level**: {analysis.risk_level.value}",
        f"- **Analysis Confidence**: {analysis.confidence_level:.2f}",
        f"- **Legacy Score**: {report.legacy_score}/100",
        "",
        "## Activity",
        f"- **Total Events**: {report.total_events}",
        f"- **Event Rate**: {report.events_per_minute:.2f}/min",
        f"- **Focus Percentage**: {report.legacy_summary.focus_percentage:.0f}%",
    ]

    breakdown = {k: v for k, v in report.severity_breakdown.items() if v}
    if breakdown:
        lines.append("- **Severity Breakdown**:")
        for severity, count in breakdown.items():
            lines.append(f"  - {severity}: {count}")

    if analysis.behavior_insights:
        lines += [
            "",
            "## Behavioral Insights",
            *[
                f"- {i.message} (confidence {i.confidence:.2f})"
                for i in analysis.behavior_insights
            ],
        ]

    if analysis.recommended_actions:
        lines += [
            "",
            "## Recommended Actions",
            *[
                f"{n + 1}. [{r.priority.value}] {r.action}"
                for n, r in enumerate(analysis.recommended_actions)
            ],
        ]
    elif report.review_notes:
        lines += [
            "",
            "## Review Notes",
            *[f"- [{note.type}] {note.message}" for note in report.review_notes],
        ]

    return "\n".join(lines)
