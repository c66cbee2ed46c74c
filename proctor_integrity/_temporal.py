"""Temporal pattern analysis over a session's event stream.

Splits the session into early / mid / late thirds, groups temporally
adjacent events into violation clusters, and flags attention decline and
stress episodes.
"""

import logging
from collections.abc import Sequence

from ._types import (
    ProctoringEvent,
    StressPattern,
    TemporalAnalysis,
    ViolationCluster,
)

logger = logging.getLogger(__name__)

_CLUSTER_GAP_S = 120.0
_ATTENTION_DECLINE_RATIO = 1.5
_STRESS_PATTERN_MIN_EVENTS = 4


def detect_clusters(
    events: Sequence[ProctoringEvent],
    max_gap_s: float = _CLUSTER_GAP_S,
) -> list[ViolationCluster]:
    """Group events whose gap to the previous event is under ``max_gap_s``.

    Single-event groups are not clusters and are dropped.

    Args:
        events: Events sorted by timestamp.
        max_gap_s: Exclusive upper bound on the gap between neighbours.

    Returns:
        Clusters in stream order, each with more than one event.
    """
    clusters: list[ViolationCluster] = []
    current: list[ProctoringEvent] = []
    previous: ProctoringEvent | None = None

    for event in events:
        if previous is None or (event.timestamp - previous.timestamp).total_seconds() < max_gap_s:
            current.append(event)
        else:
            if len(current) > 1:
                clusters.append(ViolationCluster(events=tuple(current)))
            current = [event]
        previous = event

    if len(current) > 1:
        clusters.append(ViolationCluster(events=tuple(current)))
    return clusters


def detect_stress_patterns(clusters: Sequence[ViolationCluster]) -> list[StressPattern]:
    """Report clusters with more than three events as stress episodes."""
    return [
        StressPattern(
            start_time=c.start,
            end_time=c.end,
            intensity=c.size,
            types=c.event_types,
        )
        for c in clusters
        if c.size >= _STRESS_PATTERN_MIN_EVENTS
    ]


def analyze_temporal_patterns(
    events: Sequence[ProctoringEvent],
    duration_s: float,
) -> TemporalAnalysis:
    """Bucket events into interview phases and detect clustering.

    An event's phase is decided by the seconds elapsed since the first event
    of the stream, against a boundary of ``duration_s / 3``.

    Args:
        events: Events sorted by timestamp.
        duration_s: Total session duration in seconds.

    Returns:
        TemporalAnalysis with phase counts, clusters, and stress patterns.
    """
    if not events:
        return TemporalAnalysis()

    boundary = max(duration_s, 0.0) / 3.0
    first = events[0].timestamp
    early = mid = late = 0

    for event in events:
        elapsed = (event.timestamp - first).total_seconds()
        if elapsed < boundary:
            early += 1
        elif elapsed < boundary * 2:
            mid += 1
        else:
            late += 1

    clusters = detect_clusters(events)
    stress_patterns = detect_stress_patterns(clusters)
    attention_decline = late > early * _ATTENTION_DECLINE_RATIO

    logger.debug(
        "Temporal analysis: early=%d mid=%d late=%d clusters=%d stress_patterns=%d",
        early,
        mid,
        late,
        len(clusters),
        len(stress_patterns),
    )

    return TemporalAnalysis(
        early_violations=early,
        mid_violations=mid,
        late_violations=late,
        violation_clusters=clusters,
        attention_decline=attention_decline,
        stress_patterns=stress_patterns,
    )
