"""Descriptive statistics over a session's event stream for reports."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from ._types import (
    EventType,
    FaceCountData,
    ObjectDetectionData,
    ProctoringEvent,
    Severity,
)

_EVENT_DESCRIPTIONS: dict[str, str] = {
    EventType.INTERVIEW_STARTED.value: "Interview session started",
    EventType.INTERVIEW_ENDED.value: "Interview session ended",
    EventType.FOCUS_LOST.value: "Candidate stopped looking at screen",
    EventType.FOCUS_GAINED.value: "Candidate resumed looking at screen",
    EventType.FACE_ABSENT.value: "No face detected in video feed",
    EventType.FACE_DETECTED.value: "Face detected in video feed",
    EventType.AUDIO_VIOLATION.value: "Background voices or unauthorized audio detected",
    EventType.EYE_CLOSURE_DETECTED.value: "Prolonged eye closure detected",
    EventType.DROWSINESS_DETECTED.value: "Signs of drowsiness detected",
    EventType.SYSTEM_ALERT.value: "System generated alert",
    EventType.CAMERA_PERMISSION_DENIED.value: "Camera access permission denied",
    EventType.MICROPHONE_PERMISSION_DENIED.value: "Microphone access permission denied",
    EventType.CONNECTION_LOST.value: "Network connection lost",
    EventType.CONNECTION_RESTORED.value: "Network connection restored",
}


def describe_event(event: ProctoringEvent) -> str:
    """Human-readable one-line description of an event."""
    data = event.event_data
    if event.event_type == EventType.MULTIPLE_FACES:
        count = data.face_count if isinstance(data, FaceCountData) else None
        return f"Multiple faces detected ({count if count else 'unknown'} faces)"
    if event.event_type == EventType.OBJECT_DETECTED:
        name = data.object_type if isinstance(data, ObjectDetectionData) else None
        return f"Unauthorized object detected: {name or 'unknown object'}"
    return _EVENT_DESCRIPTIONS.get(event.event_type, "Unknown event type")


@dataclass
class EventTypeStats:
    """Aggregate figures for one event type within a session."""

    event_type: str
    count: int
    avg_duration_s: float | None
    max_duration_s: float | None
    avg_confidence: float | None
    severity_count: dict[str, int] = field(default_factory=dict)


def _mean_or_none(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def severity_breakdown(events: Sequence[ProctoringEvent]) -> dict[str, int]:
    counts = {s.value: 0 for s in Severity}
    for event in events:
        counts[event.severity.value] += 1
    return counts


def event_type_stats(events: Sequence[ProctoringEvent]) -> list[EventTypeStats]:
    """Per-type counts, durations, confidences, and severity distribution.

    Types are listed in order of first occurrence.
    """
    grouped: dict[str, list[ProctoringEvent]] = {}
    for event in events:
        grouped.setdefault(event.event_type, []).append(event)

    stats: list[EventTypeStats] = []
    for event_type, group in grouped.items():
        durations = [e.duration_s for e in group if e.duration_s is not None]
        confidences = [e.confidence for e in group if e.confidence is not None]
        stats.append(EventTypeStats(
            event_type=event_type,
            count=len(group),
            avg_duration_s=_mean_or_none(durations),
            max_duration_s=max(durations) if durations else None,
            avg_confidence=_mean_or_none(confidences),
            severity_count=severity_breakdown(group),
        ))
    return stats


def critical_events(events: Sequence[ProctoringEvent]) -> list[ProctoringEvent]:
    """High and critical severity events, newest first."""
    flagged = [e for e in events if e.severity in (Severity.HIGH, Severity.CRITICAL)]
    return sorted(flagged, key=lambda e: e.timestamp, reverse=True)


def event_timeline(
    events: Sequence[ProctoringEvent],
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int | None = None,
) -> list[ProctoringEvent]:
    """Events within ``[start, end]`` in timestamp order, optionally truncated.

    Both bounds must be given for the range filter to apply.
    """
    timeline = sorted(events, key=lambda e: e.timestamp)
    if start is not None and end is not None:
        timeline = [e for e in timeline if start <= e.timestamp <= end]
    if limit is not None:
        timeline = timeline[:max(limit, 0)]
    return timeline


def events_per_minute(event_count: int, duration_s: float) -> float:
    """Event rate rounded to two decimals; 0.0 for a non-positive duration."""
    if duration_s <= 0:
        return 0.0
    return round(event_count / (duration_s / 60.0), 2)
