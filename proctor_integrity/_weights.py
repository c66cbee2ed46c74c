"""Per-type penalty weights shared by the frequency and consistency analyzers.

The lookup key is the event type with only its first hyphen removed
(``"object-detected"`` -> ``"objectdetected"``), compared against the
camelCase keys of BEHAVIOR_WEIGHTS. For the current taxonomy no key
matches, so the fallback weight applies to every event type. The lookup
is kept exactly as the scoring model was calibrated against it.
"""

from ._types import EventType

BEHAVIOR_WEIGHTS: dict[str, int] = {
    "faceAbsence": 15,
    "multipleFaces": 20,
    "objectDetection": 25,
    "focusLoss": 8,
    "audioViolation": 12,
    "eyeClosure": 5,
}

# Types weighted as critical by the frequency analyzer.
CRITICAL_EVENT_TYPES: frozenset[str] = frozenset({
    EventType.OBJECT_DETECTED.value,
    EventType.MULTIPLE_FACES.value,
    EventType.AUDIO_VIOLATION.value,
})

# Types counted by the risk classifier.
RISK_CRITICAL_EVENT_TYPES: frozenset[str] = frozenset({
    EventType.OBJECT_DETECTED.value,
    EventType.MULTIPLE_FACES.value,
})

CRITICAL_DEFAULT_WEIGHT = 10
DEFAULT_WEIGHT = 5


def weight_key(event_type: str) -> str:
    return event_type.replace("-", "", 1)


def penalty_weight(event_type: str, default: int = DEFAULT_WEIGHT) -> int:
    """Return the table weight for an event type, or ``default`` if unmatched."""
    return BEHAVIOR_WEIGHTS.get(weight_key(event_type), default)


def is_critical(event_type: str) -> bool:
    return event_type in CRITICAL_EVENT_TYPES
