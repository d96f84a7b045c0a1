"""Latency collection for completed requests.

The consumer hands every completed request's latencies to a Collector. The
Collector keeps one LatencyAccumulator per tracked metric (total latency and,
optionally, execution latency), each of which records count, mean, max and
streaming quantiles in constant memory.
"""

from __future__ import annotations

from admissionsim.core.temporal import Duration
from admissionsim.instrumentation.summary import LatencySummary
from admissionsim.sketching import DEFAULT_PROBABILITIES, ExtendedPSquare


class LatencyAccumulator:
    """Running count/mean/max plus quantile sketch for one latency metric.

    Values are stored in seconds.
    """

    def __init__(self, name: str, probabilities=DEFAULT_PROBABILITIES):
        self.name = name
        self._sketch = ExtendedPSquare(probabilities)
        self._count = 0
        self._mean = 0.0
        self._max: float | None = None

    def add(self, latency: Duration) -> None:
        value = latency.to_seconds()
        self._count += 1
        # Incremental mean keeps precision over long runs
        self._mean += (value - self._mean) / self._count
        if self._max is None or value > self._max:
            self._max = value
        self._sketch.add(value)

    @property
    def count(self) -> int:
        return self._count

    def _require_samples(self) -> None:
        if self._count == 0:
            raise ValueError(f"no samples collected for {self.name!r}")

    def mean(self) -> float:
        self._require_samples()
        return self._mean

    def max(self) -> float:
        self._require_samples()
        return self._max

    def quantile(self, p: float) -> float:
        """Approximate latency at quantile p, in seconds."""
        self._require_samples()
        return self._sketch.quantile(p)

    def p50(self) -> float:
        return self.quantile(0.50)

    def p95(self) -> float:
        return self.quantile(0.95)

    def p99(self) -> float:
        return self.quantile(0.99)

    def summary(self) -> LatencySummary | None:
        """Snapshot of the statistics, or None if nothing was collected."""
        if self._count == 0:
            return None
        return LatencySummary(
            name=self.name,
            count=self._count,
            mean=self._mean,
            p50=self.p50(),
            p95=self.p95(),
            p99=self.p99(),
            max=self._max,
        )


class Collector:
    """Streaming statistics for completed requests.

    Args:
        track_execution: Also record execution latency (completion minus
            dispatch). Total latency (completion minus arrival) is always
            recorded.
    """

    def __init__(self, track_execution: bool = True):
        self.total = LatencyAccumulator("total")
        self.execution: LatencyAccumulator | None = (
            LatencyAccumulator("execution") if track_execution else None
        )

    def collect(self, latency: Duration, execution: Duration | None = None) -> None:
        self.total.add(latency)
        if self.execution is not None and execution is not None:
            self.execution.add(execution)

    @property
    def count(self) -> int:
        return self.total.count

    # Convenience accessors on the total latency metric
    def mean(self) -> float:
        return self.total.mean()

    def max(self) -> float:
        return self.total.max()

    def quantile(self, p: float) -> float:
        return self.total.quantile(p)
