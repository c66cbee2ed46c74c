"""Data-sufficiency policy for the analysis confidence level.

Confidence describes how much data the engine had to work with, not a
statistical interval. Sparse streams and short sessions lower it; long,
event-rich sessions raise it slightly. Each adjustment is reported as a
warning so that callers can show why the confidence is low.

Decision table (adjustments are cumulative, base 0.95):
    - fewer than 5 events      → −0.10
    - session under 5 minutes  → −0.05
    - more than 20 events      → +0.02
    - result clamped to [0.50, 0.99]
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.95
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99

_SPARSE_EVENT_LIMIT = 5
_SPARSE_PENALTY = 0.1
_SHORT_SESSION_S = 300.0
_SHORT_SESSION_PENALTY = 0.05
_RICH_EVENT_LIMIT = 20
_RICH_BONUS = 0.02


@dataclass(frozen=True)
class DataSufficiency:
    """Confidence level derived from event count and session length.

    Attributes:
        confidence_level: Engine self-reported certainty in [0.5, 0.99].
        warnings: Human-readable reasons the confidence was reduced.
    """

    confidence_level: float
    warnings: list[str] = field(default_factory=list)

    @property
    def warning_message(self) -> str:
        return "; ".join(self.warnings) if self.warnings else "Sufficient data"


def assess_data_sufficiency(event_count: int, duration_s: float) -> DataSufficiency:
    """Derive the analysis confidence level from data volume.

    Args:
        event_count: Number of events analyzed.
        duration_s: Session duration in seconds.

    Returns:
        DataSufficiency with the clamped confidence and any warnings.
    """
    confidence = BASE_CONFIDENCE
    warnings: list[str] = []

    if event_count < _SPARSE_EVENT_LIMIT:
        confidence -= _SPARSE_PENALTY
        warnings.append(f"Sparse event stream ({event_count} events)")
    if duration_s < _SHORT_SESSION_S:
        confidence -= _SHORT_SESSION_PENALTY
        warnings.append(f"Short session ({duration_s:.0f}s)")
    if event_count > _RICH_EVENT_LIMIT:
        confidence += _RICH_BONUS

    if warnings:
        logger.debug("Confidence reduced: %s", "; ".join(warnings))

    return DataSufficiency(
        confidence_level=round(min(max(confidence, MIN_CONFIDENCE), MAX_CONFIDENCE), 4),
        warnings=warnings,
    )


def calculate_confidence_level(event_count: int, duration_s: float) -> float:
    return assess_data_sufficiency(event_count, duration_s).confidence_level
