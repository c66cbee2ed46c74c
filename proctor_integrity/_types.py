from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union


class EventType(str, Enum):
    """Closed taxonomy of proctoring event types emitted by the client."""

    INTERVIEW_STARTED = "interview-started"
    INTERVIEW_ENDED = "interview-ended"
    FOCUS_LOST = "focus-lost"
    FOCUS_GAINED = "focus-gained"
    FACE_ABSENT = "face-absent"
    FACE_DETECTED = "face-detected"
    MULTIPLE_FACES = "multiple-faces"
    OBJECT_DETECTED = "object-detected"
    AUDIO_VIOLATION = "audio-violation"
    EYE_CLOSURE_DETECTED = "eye-closure-detected"
    DROWSINESS_DETECTED = "drowsiness-detected"
    SYSTEM_ALERT = "system-alert"
    CAMERA_PERMISSION_DENIED = "camera-permission-denied"
    MICROPHONE_PERMISSION_DENIED = "microphone-permission-denied"
    CONNECTION_LOST = "connection-lost"
    CONNECTION_RESTORED = "connection-restored"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """Coarse categorical severity of a whole session."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class InsightType(str, Enum):
    FOCUS_PATTERN = "focus_pattern"
    ATTENTION_DECLINE = "attention_decline"
    BEHAVIOR_CLUSTERING = "behavior_clustering"
    UNAUTHORIZED_OBJECTS = "unauthorized_objects"


class RecommendationType(str, Enum):
    INTEGRITY_CONCERN = "integrity_concern"
    IMMEDIATE_ACTION = "immediate_action"
    INTERVIEW_ADJUSTMENT = "interview_adjustment"


# Severity assigned to an event when the producer did not set one.
DEFAULT_SEVERITY: dict[str, Severity] = {
    EventType.INTERVIEW_STARTED.value: Severity.LOW,
    EventType.INTERVIEW_ENDED.value: Severity.LOW,
    EventType.FOCUS_LOST.value: Severity.MEDIUM,
    EventType.FOCUS_GAINED.value: Severity.LOW,
    EventType.FACE_ABSENT.value: Severity.HIGH,
    EventType.FACE_DETECTED.value: Severity.LOW,
    EventType.MULTIPLE_FACES.value: Severity.CRITICAL,
    EventType.OBJECT_DETECTED.value: Severity.HIGH,
    EventType.AUDIO_VIOLATION.value: Severity.MEDIUM,
    EventType.EYE_CLOSURE_DETECTED.value: Severity.MEDIUM,
    EventType.DROWSINESS_DETECTED.value: Severity.HIGH,
    EventType.SYSTEM_ALERT.value: Severity.MEDIUM,
    EventType.CAMERA_PERMISSION_DENIED.value: Severity.CRITICAL,
    EventType.MICROPHONE_PERMISSION_DENIED.value: Severity.HIGH,
    EventType.CONNECTION_LOST.value: Severity.HIGH,
    EventType.CONNECTION_RESTORED.value: Severity.LOW,
}


# ── Typed event payloads ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ObjectDetectionData:
    """Payload of an ``object-detected`` event (phone, book, laptop, ...)."""

    object_type: str | None = None
    object_count: int | None = None
    coordinates: BoundingBox | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FaceCountData:
    """Payload of a ``multiple-faces`` event."""

    face_count: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AudioLevelData:
    """Payload of an ``audio-violation`` event."""

    audio_level: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EyeClosureData:
    """Payload of ``eye-closure-detected`` and ``drowsiness-detected`` events."""

    eye_closure_duration_s: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GenericEventData:
    """Payload of every other event type. All keys land in ``extra``."""

    extra: dict[str, Any] = field(default_factory=dict)


EventData = Union[
    ObjectDetectionData,
    FaceCountData,
    AudioLevelData,
    EyeClosureData,
    GenericEventData,
]


@dataclass(frozen=True)
class ProctoringEvent:
    """One classified proctoring event belonging to a single interview session.

    ``event_type`` keeps the raw string sent by the producer so that unknown
    or malformed types still flow through analysis with the default weight.
    Compare against ``EventType`` members directly; they are ``str`` enums.

    Attributes:
        timestamp: Instant of the event, normalized to UTC. Naive datetimes
            are taken as UTC.
        event_type: Raw event type string; ``""`` when missing.
        severity: Explicit severity or the table default for the type.
        event_data: Typed payload for the event type.
        duration_s: Duration in seconds for events that span time.
        confidence: Detector confidence in [0, 1].
    """

    timestamp: datetime
    event_type: str
    severity: Severity = Severity.MEDIUM
    event_data: EventData = field(default_factory=GenericEventData)
    duration_s: float | None = None
    confidence: float | None = None

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))
        else:
            object.__setattr__(self, "timestamp", self.timestamp.astimezone(timezone.utc))
        # Enum members hash by name, so keep plain strings for set/dict lookups.
        if isinstance(self.event_type, EventType):
            object.__setattr__(self, "event_type", self.event_type.value)
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))

    @property
    def known_type(self) -> EventType | None:
        """The taxonomy member for this event, or None for unknown types."""
        try:
            return EventType(self.event_type)
        except ValueError:
            return None


# ── Analysis artifacts ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ViolationCluster:
    """Temporally adjacent events treated as one behavioral episode."""

    events: tuple[ProctoringEvent, ...]

    @property
    def size(self) -> int:
        return len(self.events)

    @property
    def start(self) -> datetime:
        return self.events[0].timestamp

    @property
    def end(self) -> datetime:
        return self.events[-1].timestamp

    @property
    def event_types(self) -> list[str]:
        """Unique event types in first-seen order."""
        return list(dict.fromkeys(e.event_type for e in self.events))


@dataclass(frozen=True)
class StressPattern:
    start_time: datetime
    end_time: datetime
    intensity: int
    types: list[str]


@dataclass(frozen=True)
class RepeatedPattern:
    """A three-event signature seen more than once in a stream."""

    sequence: str
    frequency: int

    @property
    def event_types(self) -> list[str]:
        return self.sequence.split(",")


@dataclass(frozen=True)
class TemporalAnalysis:
    early_violations: int = 0
    mid_violations: int = 0
    late_violations: int = 0
    violation_clusters: list[ViolationCluster] = field(default_factory=list)
    attention_decline: bool = False
    stress_patterns: list[StressPattern] = field(default_factory=list)


@dataclass(frozen=True)
class FrequencyAnalysis:
    total_violations: int = 0
    critical_violations: int = 0
    frequency_score: float = 100.0
    violation_diversity: int = 0
    repeated_patterns: list[RepeatedPattern] = field(default_factory=list)


@dataclass(frozen=True)
class ConsistencyAnalysis:
    focus_consistency: float = 100.0
    behavior_stability: float = 100.0
    overall_consistency: float = 100.0


@dataclass(frozen=True)
class Insight:
    """Natural-language explanation of a detected pattern."""

    type: InsightType
    message: str
    confidence: float


@dataclass(frozen=True)
class Recommendation:
    type: RecommendationType
    action: str
    priority: Priority


@dataclass(frozen=True)
class BehavioralAnalysisResult:
    """Structured output of one full behavioral analysis.

    Recomputed from scratch on every call; nothing is carried between calls.
    """

    integrity_score: int
    risk_level: RiskLevel
    behavior_insights: list[Insight]
    recommended_actions: list[Recommendation]
    confidence_level: float


@dataclass(frozen=True)
class Prediction:
    """Short-horizon estimate of the next violation for live dashboards."""

    probability: float
    type: str
    time_window_s: int = 60
    confidence_label: Literal["low", "medium", "high"] = "medium"
