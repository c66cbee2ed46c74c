"""Short-horizon violation prediction for live monitoring dashboards.

Looks for repeated three-event sequences in the most recent events and
predicts that the leading event type of the strongest sequence recurs
within the next minute.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from ._coercion import EventLike, coerce_events
from ._frequency import identify_repeated_patterns
from ._types import EventType, Prediction

logger = logging.getLogger(__name__)

PREDICTION_WINDOW_S = 60
_MIN_EVENTS = 3
_RECENT_EVENTS = 5
_BASE_PROBABILITY = 0.1
_PROBABILITY_PER_REPEAT = 0.2
_MAX_PROBABILITY = 0.8
_HIGH_CONFIDENCE_ABOVE = 0.5
_UNKNOWN_TYPE = "unknown"
_FALLBACK_TYPE = EventType.FOCUS_LOST.value


def predict_next_violation(
    events: Iterable[EventLike] | None,
    now: datetime | None = None,
) -> Prediction:
    """Estimate probability and type of the next violation.

    Args:
        events: Recent session events, any order. Only the last five after
            sorting are inspected.
        now: Current time. Events stamped after it are ignored. Naive
            datetimes are taken as UTC.

    Returns:
        Prediction with ``time_window_s`` fixed at 60.
    """
    ordered = coerce_events(events)
    if now is not None:
        cutoff = now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)
        ordered = [e for e in ordered if e.timestamp <= cutoff]

    if len(ordered) < _MIN_EVENTS:
        return Prediction(
            probability=_BASE_PROBABILITY,
            type=_UNKNOWN_TYPE,
            time_window_s=PREDICTION_WINDOW_S,
            confidence_label="low",
        )

    patterns = identify_repeated_patterns(ordered[-_RECENT_EVENTS:])

    probability = _BASE_PROBABILITY
    predicted_type = _FALLBACK_TYPE
    if patterns:
        # max() keeps the first of equally frequent patterns.
        top = max(patterns, key=lambda p: p.frequency)
        probability = min(_MAX_PROBABILITY, top.frequency * _PROBABILITY_PER_REPEAT)
        predicted_type = top.event_types[0]
        logger.debug("Top recent pattern %s x%d", top.sequence, top.frequency)

    return Prediction(
        probability=probability,
        type=predicted_type,
        time_window_s=PREDICTION_WINDOW_S,
        confidence_label="high" if probability > _HIGH_CONFIDENCE_ABOVE else "medium",
    )
