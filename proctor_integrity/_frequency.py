"""Violation frequency analysis and repeated-sequence detection."""

from collections import Counter
from collections.abc import Sequence

from ._types import FrequencyAnalysis, ProctoringEvent, RepeatedPattern
from ._weights import CRITICAL_DEFAULT_WEIGHT, DEFAULT_WEIGHT, is_critical, penalty_weight

_SEQUENCE_LENGTH = 3
_SIGNATURE_SEPARATOR = ","


def sequence_signature(events: Sequence[ProctoringEvent]) -> str:
    return _SIGNATURE_SEPARATOR.join(e.event_type for e in events)


def identify_repeated_patterns(events: Sequence[ProctoringEvent]) -> list[RepeatedPattern]:
    """Find three-event type sequences that occur more than once.

    A window of three consecutive events slides one step at a time, so
    occurrences may overlap. Patterns are returned in order of first
    occurrence.
    """
    counts: dict[str, int] = {}
    for i in range(len(events) - _SEQUENCE_LENGTH + 1):
        signature = sequence_signature(events[i:i + _SEQUENCE_LENGTH])
        counts[signature] = counts.get(signature, 0) + 1

    return [
        RepeatedPattern(sequence=signature, frequency=count)
        for signature, count in counts.items()
        if count > 1
    ]


def frequency_penalty(type_counts: Counter[str]) -> int:
    """Sum of ``count × weight`` over every distinct event type."""
    total = 0
    for event_type, count in type_counts.items():
        default = CRITICAL_DEFAULT_WEIGHT if is_critical(event_type) else DEFAULT_WEIGHT
        total += count * penalty_weight(event_type, default)
    return total


def analyze_violation_frequency(events: Sequence[ProctoringEvent]) -> FrequencyAnalysis:
    """Count violations by type and derive the frequency sub-score.

    Returns:
        FrequencyAnalysis with ``frequency_score`` clamped to [0, 100].
    """
    type_counts: Counter[str] = Counter(e.event_type for e in events)

    return FrequencyAnalysis(
        total_violations=len(events),
        critical_violations=sum(1 for e in events if is_critical(e.event_type)),
        frequency_score=float(max(0, 100 - frequency_penalty(type_counts))),
        violation_diversity=len(type_counts),
        repeated_patterns=identify_repeated_patterns(events),
    )
