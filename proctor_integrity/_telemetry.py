"""Per-stage latency instrumentation for the scoring pipeline.

The live dashboard re-runs the whole analysis on every poll with a growing
event list, so each pipeline stage carries a latency budget. Timings go to
an OpenTelemetry histogram for whatever SDK the host process installs, and
are kept in memory for ``stats()`` and the Prometheus text export.
"""

import logging
import math
import statistics
import time
from collections import defaultdict
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

from opentelemetry import metrics as otel_metrics

logger = logging.getLogger(__name__)

# Budget per pipeline stage, in milliseconds.
LATENCY_BUDGETS_MS: dict[str, float] = {
    "coercion": 20.0,
    "temporal_analysis": 20.0,
    "frequency_analysis": 20.0,
    "consistency_analysis": 20.0,
    "fusion": 2.0,
    "insights": 5.0,
    "prediction": 10.0,
    "end_to_end": 250.0,
}

_METRIC_PREFIX = "proctor_integrity_stage"


@dataclass(frozen=True)
class StageStats:
    """Latency summary of one pipeline stage.

    Attributes:
        count: Number of timed runs.
        mean_ms: Mean latency.
        p95_ms: Nearest-rank 95th percentile latency.
        max_ms: Slowest run.
        over_budget: Runs slower than the stage budget.
    """

    count: int
    mean_ms: float
    p95_ms: float
    max_ms: float
    over_budget: int


def _nearest_rank(sorted_samples: list[float], quantile: float) -> float:
    rank = max(1, math.ceil(quantile * len(sorted_samples)))
    return sorted_samples[rank - 1]


class LatencyTracker:
    """Caller-owned latency recorder for analysis runs.

    Pass one into ``analyze_behavior`` or ``build_live_snapshot`` to time
    each stage; the engine itself holds no tracker.

    Args:
        meter_name: OpenTelemetry meter name.
        budgets_ms: Stage budgets; defaults to LATENCY_BUDGETS_MS.
    """

    def __init__(
        self,
        meter_name: str = "proctor_integrity",
        budgets_ms: Mapping[str, float] | None = None,
    ) -> None:
        self._budgets = dict(LATENCY_BUDGETS_MS if budgets_ms is None else budgets_ms)
        self._samples: dict[str, list[float]] = defaultdict(list)
        self._over_budget: dict[str, int] = defaultdict(int)
        self._histogram = otel_metrics.get_meter(meter_name).create_histogram(
            name="proctor_integrity.stage_latency",
            unit="ms",
            description="Scoring pipeline stage latency",
        )

    @contextmanager
    def measure(self, stage: str) -> Iterator[None]:
        """Time the enclosed block as one run of ``stage``.

        The run is recorded even if the block raises.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            self._samples[stage].append(elapsed_ms)
            self._histogram.record(elapsed_ms, {"stage": stage})

            budget = self._budgets.get(stage)
            if budget is not None and elapsed_ms > budget:
                self._over_budget[stage] += 1
                logger.warning(
                    "Stage %s took %.1fms (budget %.1fms)", stage, elapsed_ms, budget
                )

    def stats(self) -> dict[str, StageStats]:
        """Latency summary per stage, in first-timed order."""
        summary: dict[str, StageStats] = {}
        for stage, samples in self._samples.items():
            ordered = sorted(samples)
            summary[stage] = StageStats(
                count=len(ordered),
                mean_ms=round(statistics.fmean(ordered), 4),
                p95_ms=round(_nearest_rank(ordered, 0.95), 4),
                max_ms=round(ordered[-1], 4),
                over_budget=self._over_budget[stage],
            )
        return summary

    def prometheus_text(self) -> str:
        """Render ``stats()`` in the Prometheus text exposition format.

        One HELP/TYPE header per metric family, one sample per stage.
        """
        summary = self.stats()
        if not summary:
            return ""

        families = [
            ("latency_ms_mean", "gauge", "Mean stage latency in milliseconds.",
             lambda s: s.mean_ms),
            ("latency_ms_p95", "gauge", "95th percentile stage latency in milliseconds.",
             lambda s: s.p95_ms),
            ("latency_ms_max", "gauge", "Slowest stage run in milliseconds.",
             lambda s: s.max_ms),
            ("runs_total", "counter", "Timed stage runs.",
             lambda s: s.count),
            ("over_budget_total", "counter", "Stage runs slower than their budget.",
             lambda s: s.over_budget),
        ]

        lines: list[str] = []
        for suffix, kind, help_text, value in families:
            name = f"{_METRIC_PREFIX}_{suffix}"
            lines.append(f"# HELP {name} {help_text}")
            lines.append(f"# TYPE {name} {kind}")
            for stage, stage_stats in summary.items():
                lines.append(f'{name}{{stage="{stage}"}} {value(stage_stats)}')
        return "\n".join(lines) + "\n"
