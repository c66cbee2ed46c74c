"""Coercion of raw event records into immutable ProctoringEvent snapshots.

Upstream stores hand the engine plain mappings (JSON documents, ORM rows
converted to dicts) in whatever order they arrived over the network. This
module turns them into frozen events, sorted by timestamp, without ever
touching the caller's list.

Only records that cannot be interpreted at all raise EventContractError.
Unknown event types and severities degrade to table defaults.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from ._types import (
    DEFAULT_SEVERITY,
    AudioLevelData,
    BoundingBox,
    EventData,
    EventType,
    EyeClosureData,
    FaceCountData,
    GenericEventData,
    ObjectDetectionData,
    ProctoringEvent,
    Severity,
)

logger = logging.getLogger(__name__)


class EventContractError(ValueError):
    """Raised when an event record or session duration cannot be coerced."""


EventLike = ProctoringEvent | Mapping[str, Any]


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            raise EventContractError(f"Event timestamp is not finite: {value!r}")
        try:
            ts = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise EventContractError(f"Event timestamp out of range: {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as exc:
            raise EventContractError(f"Unparseable event timestamp: {value!r}") from exc
    elif value is None:
        raise EventContractError("Event record has no timestamp")
    else:
        raise EventContractError(f"Unsupported timestamp type: {type(value).__name__}")

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    try:
        return ts.astimezone(timezone.utc)
    except OverflowError as exc:
        raise EventContractError(f"Event timestamp out of range: {value!r}") from exc


def _coerce_optional_float(value: Any, name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise EventContractError(f"Event {name} must be numeric, got bool")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise EventContractError(f"Event {name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        return None
    return number


def _coerce_event_type(value: Any) -> str:
    if value is None:
        logger.debug("Event record without eventType; treating as unknown")
        return ""
    if isinstance(value, EventType):
        return value.value
    text = str(value).strip()
    if text not in DEFAULT_SEVERITY:
        logger.debug("Unknown eventType %r; default penalty weight applies", text)
    return text


def _coerce_severity(value: Any, event_type: str) -> Severity:
    default = DEFAULT_SEVERITY.get(event_type, Severity.MEDIUM)
    if value is None or value == "":
        return default
    try:
        return Severity(str(getattr(value, "value", value)).lower())
    except ValueError:
        logger.debug("Unknown severity %r for %r; using %s", value, event_type, default.value)
        return default


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _float_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _bounding_box(value: Any) -> BoundingBox | None:
    if not isinstance(value, Mapping):
        return None
    coords = [_float_or_none(value.get(k)) for k in ("x", "y", "width", "height")]
    if any(c is None for c in coords):
        return None
    x, y, width, height = coords
    return BoundingBox(x=x, y=y, width=width, height=height)  # type: ignore[arg-type]


# Payload keys recognised per shape, in both camelCase and snake_case.
_OBJECT_KEYS = {"objectType", "object_type", "objectCount", "object_count", "coordinates"}
_FACE_KEYS = {"faceCount", "face_count"}
_AUDIO_KEYS = {"audioLevel", "audio_level"}
_EYE_KEYS = {"eyeClosureDuration", "eye_closure_duration", "eye_closure_duration_s"}


def coerce_event_data(event_type: str, data: Any) -> EventData:
    """Build the typed payload for an event type from a free-form mapping.

    Unrecognised keys are preserved in ``extra``. Payload values that do not
    parse are dropped rather than rejected; the payload is advisory.
    """
    if isinstance(data, (ObjectDetectionData, FaceCountData, AudioLevelData,
                         EyeClosureData, GenericEventData)):
        return data
    if not isinstance(data, Mapping):
        return GenericEventData()

    raw = dict(data)

    if event_type == EventType.OBJECT_DETECTED:
        object_type = _pick(raw, "objectType", "object_type")
        return ObjectDetectionData(
            object_type=str(object_type) if object_type else None,
            object_count=_int_or_none(_pick(raw, "objectCount", "object_count")),
            coordinates=_bounding_box(raw.get("coordinates")),
            extra={k: v for k, v in raw.items() if k not in _OBJECT_KEYS},
        )
    if event_type == EventType.MULTIPLE_FACES:
        return FaceCountData(
            face_count=_int_or_none(_pick(raw, "faceCount", "face_count")),
            extra={k: v for k, v in raw.items() if k not in _FACE_KEYS},
        )
    if event_type == EventType.AUDIO_VIOLATION:
        return AudioLevelData(
            audio_level=_float_or_none(_pick(raw, "audioLevel", "audio_level")),
            extra={k: v for k, v in raw.items() if k not in _AUDIO_KEYS},
        )
    if event_type in (EventType.EYE_CLOSURE_DETECTED, EventType.DROWSINESS_DETECTED):
        return EyeClosureData(
            eye_closure_duration_s=_float_or_none(
                _pick(raw, "eyeClosureDuration", "eye_closure_duration", "eye_closure_duration_s")
            ),
            extra={k: v for k, v in raw.items() if k not in _EYE_KEYS},
        )
    return GenericEventData(extra=raw)


def coerce_event(record: EventLike) -> ProctoringEvent:
    """Convert one raw record into a ProctoringEvent.

    Accepts an existing ProctoringEvent (returned unchanged) or a mapping
    using either the wire names (``eventType``, ``eventData``) or
    snake_case names (``event_type``, ``event_data``).

    Raises:
        EventContractError: If the record is not a mapping, has no usable
            timestamp, or carries a non-numeric duration or confidence.
    """
    if isinstance(record, ProctoringEvent):
        return record
    if not isinstance(record, Mapping):
        raise EventContractError(
            f"Event record must be a mapping, got {type(record).__name__}"
        )

    event_type = _coerce_event_type(_pick(record, "eventType", "event_type"))
    timestamp = _coerce_timestamp(record.get("timestamp"))
    duration_s = _coerce_optional_float(_pick(record, "duration", "duration_s"), "duration")
    confidence = _coerce_optional_float(record.get("confidence"), "confidence")
    if confidence is not None:
        confidence = min(max(confidence, 0.0), 1.0)

    return ProctoringEvent(
        timestamp=timestamp,
        event_type=event_type,
        severity=_coerce_severity(record.get("severity"), event_type),
        event_data=coerce_event_data(event_type, _pick(record, "eventData", "event_data")),
        duration_s=duration_s,
        confidence=confidence,
    )


def coerce_events(records: Iterable[EventLike] | None) -> list[ProctoringEvent]:
    """Snapshot and sort a session's events by timestamp.

    Always returns a new list; the input is never mutated. The sort is
    stable, so events sharing a timestamp keep their arrival order.
    """
    if records is None:
        return []
    events = [coerce_event(r) for r in records]
    events.sort(key=lambda e: e.timestamp)
    return events


def coerce_duration(value: Any) -> float:
    """Coerce a session duration in seconds. None and NaN become 0.0.

    Raises:
        EventContractError: If the value is not numeric.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise EventContractError("Session duration must be numeric, got bool")
    try:
        duration = float(value)
    except (TypeError, ValueError) as exc:
        raise EventContractError(f"Session duration must be numeric, got {value!r}") from exc
    if math.isnan(duration):
        return 0.0
    return duration
