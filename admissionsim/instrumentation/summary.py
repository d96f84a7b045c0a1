"""Simulation summary generated after a run completes.

SimulationSummary is what Simulation.run() returns: the configured rates,
the pipeline counters, the observed peaks and the latency statistics. Every
time value is in seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LatencySummary:
    """Statistics for one latency metric, in seconds."""
    name: str
    count: int
    mean: float
    p50: float
    p95: float
    p99: float
    max: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "p50": self.p50,
            "p95": self.p95,
            "p99": self.p99,
            "max": self.max,
        }


@dataclass(frozen=True)
class SimulationSummary:
    """End-of-run aggregates of a simulation."""
    duration_s: float
    producer_rate: float
    consumer_rate: float
    concurrency_limit: int
    generated: int
    dispatched: int
    processed: int
    max_backlog: int
    max_in_service: int
    final_backlog: int
    final_in_service: int
    total_latency: LatencySummary | None = None
    execution_latency: LatencySummary | None = None

    @property
    def throughput(self) -> float:
        """Completed requests per simulated second."""
        if self.duration_s <= 0:
            return 0.0
        return self.processed / self.duration_s

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "duration_s": self.duration_s,
            "producer_rate": self.producer_rate,
            "consumer_rate": self.consumer_rate,
            "concurrency_limit": self.concurrency_limit,
            "generated": self.generated,
            "dispatched": self.dispatched,
            "processed": self.processed,
            "max_backlog": self.max_backlog,
            "max_in_service": self.max_in_service,
            "final_backlog": self.final_backlog,
            "final_in_service": self.final_in_service,
        }
        if self.total_latency is not None:
            result["total_latency"] = self.total_latency.to_dict()
        if self.execution_latency is not None:
            result["execution_latency"] = self.execution_latency.to_dict()
        return result
