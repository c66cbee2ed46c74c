"""Behavioral consistency analysis.

Two variability measures feed the consistency sub-score:
- focus consistency: coefficient of variation of the gaps between focus events
- behavior stability: variance of per-window penalty scores over 5-minute windows
"""

import statistics
from collections.abc import Sequence

from ._fusion import clamp_score
from ._types import ConsistencyAnalysis, ProctoringEvent
from ._weights import DEFAULT_WEIGHT, penalty_weight

_WINDOW_S = 5 * 60.0
_FOCUS_CV_FACTOR = 20.0
_STABILITY_VARIANCE_FACTOR = 10.0
_FOCUS_SHARE = 0.4
_STABILITY_SHARE = 0.6


def is_focus_event(event: ProctoringEvent) -> bool:
    return "focus" in event.event_type


def coefficient_of_variation(events: Sequence[ProctoringEvent]) -> float:
    """Population stddev / mean of the gaps between consecutive events.

    Returns 0.0 for fewer than two events or a non-positive mean gap.
    """
    if len(events) < 2:
        return 0.0
    gaps = [
        (b.timestamp - a.timestamp).total_seconds()
        for a, b in zip(events, events[1:])
    ]
    mean = statistics.fmean(gaps)
    if mean <= 0:
        return 0.0
    return statistics.pstdev(gaps) / mean


def population_variance(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return statistics.pvariance(values)


def divide_into_time_windows(
    events: Sequence[ProctoringEvent],
    window_s: float = _WINDOW_S,
) -> list[list[ProctoringEvent]]:
    """Split a sorted stream into sequential windows.

    A new window opens at the first event that is ``window_s`` or more after
    the current window's opening event.
    """
    if not events:
        return []

    windows: list[list[ProctoringEvent]] = []
    current: list[ProctoringEvent] = []
    window_start = events[0].timestamp

    for event in events:
        if (event.timestamp - window_start).total_seconds() < window_s:
            current.append(event)
        else:
            if current:
                windows.append(current)
            current = [event]
            window_start = event.timestamp

    if current:
        windows.append(current)
    return windows


def window_score(events: Sequence[ProctoringEvent]) -> float:
    """100 minus every event's penalty weight, floored at 0."""
    score = 100.0
    for event in events:
        score -= penalty_weight(event.event_type, DEFAULT_WEIGHT)
    return max(0.0, score)


def analyze_behavioral_consistency(events: Sequence[ProctoringEvent]) -> ConsistencyAnalysis:
    """Measure how evenly the candidate's behavior is spread over the session.

    Args:
        events: Events sorted by timestamp.

    Returns:
        ConsistencyAnalysis with every score clamped to [0, 100].
    """
    focus_events = [e for e in events if is_focus_event(e)]
    focus_consistency = 100.0
    if len(focus_events) >= 2:
        cv = coefficient_of_variation(focus_events)
        focus_consistency = clamp_score(100.0 - cv * _FOCUS_CV_FACTOR)

    scores = [window_score(w) for w in divide_into_time_windows(events)]
    behavior_stability = clamp_score(
        100.0 - population_variance(scores) * _STABILITY_VARIANCE_FACTOR
    )

    overall = clamp_score(
        focus_consistency * _FOCUS_SHARE + behavior_stability * _STABILITY_SHARE
    )

    return ConsistencyAnalysis(
        focus_consistency=focus_consistency,
        behavior_stability=behavior_stability,
        overall_consistency=overall,
    )
