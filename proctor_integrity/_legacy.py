"""Legacy rule-based integrity score stored on the session record.

This is a simpler, independent formula built from raw per-type counts. It
is the persisted score whenever the full behavioral analysis has not run;
when both exist, the behavioral analysis score takes precedence (see
``resolve_integrity_score``).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from ._fusion import round_half_up
from ._types import BehavioralAnalysisResult, EventType, ProctoringEvent

logger = logging.getLogger(__name__)

_FOCUS_LOSS_POINTS, _FOCUS_LOSS_CAP = 2, 30
_OBJECT_POINTS, _OBJECT_CAP = 5, 25
_MULTI_FACE_POINTS, _MULTI_FACE_CAP = 3, 20
_AUDIO_POINTS, _AUDIO_CAP = 3, 15
_FOCUS_PERCENT_FLOOR = 70.0
_FOCUS_PERCENT_FACTOR = 0.3
_CONSECUTIVE_LOSS_LIMIT_S = 30.0
_CONSECUTIVE_LOSS_FACTOR = 0.5
_CONSECUTIVE_LOSS_CAP = 10.0

_EXCELLENT_SCORE = 90
_GOOD_SCORE = 70
_OBJECT_NOTE_LIMIT = 3
_LOW_FOCUS_PERCENT = 60.0
_AUDIO_NOTE_LIMIT = 2


@dataclass
class LegacySummary:
    """Per-session violation counters kept on the interview record.

    Attributes:
        total_focus_lost_events: focus-lost plus face-absent events.
        total_object_detections: object-detected events.
        total_multiple_face_events: multiple-faces events.
        total_audio_violations: audio-violation events.
        focus_percentage: Share of the session spent in focus, 0–100.
        max_consecutive_focus_loss_s: Longest paired focus-lost → focus-gained span.
    """

    total_focus_lost_events: int = 0
    total_object_detections: int = 0
    total_multiple_face_events: int = 0
    total_audio_violations: int = 0
    focus_percentage: float = 100.0
    max_consecutive_focus_loss_s: float = 0.0


def _focus_loss_spans(events: Sequence[ProctoringEvent]) -> list[float]:
    """Seconds between each focus-lost and the focus-gained that closes it.

    A focus-lost with no later focus-gained is not counted. A second
    focus-lost before the regain restarts the span.
    """
    spans: list[float] = []
    lost_at: datetime | None = None
    for event in events:
        if event.event_type == EventType.FOCUS_LOST:
            lost_at = event.timestamp
        elif event.event_type == EventType.FOCUS_GAINED and lost_at is not None:
            spans.append((event.timestamp - lost_at).total_seconds())
            lost_at = None
    return spans


def summarize_session(
    events: Sequence[ProctoringEvent],
    duration_s: float,
) -> LegacySummary:
    """Recount the session record counters from a sorted event stream."""
    counts = {t: 0 for t in EventType}
    for event in events:
        known = event.known_type
        if known is not None:
            counts[known] += 1

    spans = _focus_loss_spans(events)
    focus_percentage = 100.0
    if spans and duration_s > 0:
        lost_s = sum(spans)
        focus_percentage = float(max(0, round_half_up((duration_s - lost_s) / duration_s * 100)))

    return LegacySummary(
        total_focus_lost_events=counts[EventType.FOCUS_LOST] + counts[EventType.FACE_ABSENT],
        total_object_detections=counts[EventType.OBJECT_DETECTED],
        total_multiple_face_events=counts[EventType.MULTIPLE_FACES],
        total_audio_violations=counts[EventType.AUDIO_VIOLATION],
        focus_percentage=focus_percentage,
        max_consecutive_focus_loss_s=max(spans, default=0.0),
    )


def calculate_legacy_score(summary: LegacySummary) -> int:
    """Linear-deduction integrity score in [0, 100]."""
    score = 100.0
    score -= min(summary.total_focus_lost_events * _FOCUS_LOSS_POINTS, _FOCUS_LOSS_CAP)
    score -= min(summary.total_object_detections * _OBJECT_POINTS, _OBJECT_CAP)
    score -= min(summary.total_multiple_face_events * _MULTI_FACE_POINTS, _MULTI_FACE_CAP)
    score -= min(summary.total_audio_violations * _AUDIO_POINTS, _AUDIO_CAP)

    if summary.focus_percentage < _FOCUS_PERCENT_FLOOR:
        score -= (_FOCUS_PERCENT_FLOOR - summary.focus_percentage) * _FOCUS_PERCENT_FACTOR

    if summary.max_consecutive_focus_loss_s > _CONSECUTIVE_LOSS_LIMIT_S:
        excess = summary.max_consecutive_focus_loss_s - _CONSECUTIVE_LOSS_LIMIT_S
        score -= min(excess * _CONSECUTIVE_LOSS_FACTOR, _CONSECUTIVE_LOSS_CAP)

    return min(max(0, round_half_up(score)), 100)


def resolve_integrity_score(
    analysis: BehavioralAnalysisResult | None,
    legacy_score: int | None,
) -> int | None:
    """Pick the score to show: the behavioral analysis wins whenever it ran.

    A behavioral score of 0 is a real result and still wins.
    """
    if analysis is not None:
        return analysis.integrity_score
    return legacy_score


@dataclass(frozen=True)
class ReviewNote:
    type: Literal["positive", "warning", "critical"]
    message: str


def legacy_review_notes(legacy_score: int, summary: LegacySummary) -> list[ReviewNote]:
    """Score-band review notes for reports when the engine gave no actions."""
    notes: list[ReviewNote] = []

    if legacy_score >= _EXCELLENT_SCORE:
        notes.append(ReviewNote("positive", "Excellent interview conduct with minimal violations"))
    elif legacy_score >= _GOOD_SCORE:
        notes.append(ReviewNote("warning", "Good overall conduct with some minor issues to review"))
    else:
        notes.append(ReviewNote("critical", "Multiple violations detected - detailed review recommended"))

    if summary.total_object_detections > _OBJECT_NOTE_LIMIT:
        notes.append(ReviewNote("warning", "Multiple unauthorized objects detected during interview"))
    if summary.total_multiple_face_events > 0:
        notes.append(ReviewNote(
            "critical",
            "Additional people detected in video feed - possible external assistance",
        ))
    if summary.focus_percentage < _LOW_FOCUS_PERCENT:
        notes.append(ReviewNote("warning", "Low focus percentage indicates frequent distractions"))
    if summary.total_audio_violations > _AUDIO_NOTE_LIMIT:
        notes.append(ReviewNote(
            "warning",
            "Background voices detected - ensure interview environment is secure",
        ))

    logger.debug("Legacy review notes for score %d: %d", legacy_score, len(notes))
    return notes
