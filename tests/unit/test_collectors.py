"""Tests for latency accumulators and the collector."""

import pytest

from admissionsim import Collector, Duration, LatencyAccumulator


class TestLatencyAccumulator:

    def test_empty_accumulator_raises(self):
        acc = LatencyAccumulator("total")

        with pytest.raises(ValueError, match="no samples"):
            acc.mean()
        with pytest.raises(ValueError, match="no samples"):
            acc.quantile(0.5)
        assert acc.summary() is None

    def test_single_sample(self):
        acc = LatencyAccumulator("total")
        acc.add(Duration.from_micros(1500))

        assert acc.count == 1
        assert acc.mean() == 0.0015
        assert acc.max() == 0.0015
        assert acc.p99() == 0.0015

    def test_linear_latencies(self):
        """Latencies L, 2L, ..., 200L: mean 100.5L, quantiles near k*L."""
        acc = LatencyAccumulator("total")
        step = Duration.from_micros(1000)
        for k in range(1, 201):
            acc.add(step * k)

        assert acc.count == 200
        assert acc.mean() == pytest.approx(0.1005)
        assert acc.max() == pytest.approx(0.2)
        assert acc.p50() == pytest.approx(0.1, rel=0.08)
        assert acc.p99() == pytest.approx(0.198, rel=0.05)
        assert acc.p50() <= acc.p95() <= acc.p99() <= acc.max()

    def test_summary_snapshot(self):
        acc = LatencyAccumulator("execution")
        for micros in (100, 200, 300):
            acc.add(Duration.from_micros(micros))

        summary = acc.summary()
        assert summary.name == "execution"
        assert summary.count == 3
        assert summary.mean == pytest.approx(0.0002)
        assert summary.max == pytest.approx(0.0003)
        assert set(summary.to_dict()) == {"count", "mean", "p50", "p95", "p99", "max"}


class TestCollector:

    def test_collects_both_metrics(self):
        collector = Collector()
        collector.collect(Duration.from_micros(1000), Duration.from_micros(400))

        assert collector.count == 1
        assert collector.total.mean() == 0.001
        assert collector.execution.mean() == 0.0004

    def test_execution_tracking_disabled(self):
        collector = Collector(track_execution=False)
        collector.collect(Duration.from_micros(1000), Duration.from_micros(400))

        assert collector.execution is None
        assert collector.total.count == 1

    def test_missing_execution_sample_is_skipped(self):
        collector = Collector()
        collector.collect(Duration.from_micros(1000))

        assert collector.total.count == 1
        assert collector.execution.count == 0

    def test_convenience_accessors_use_total(self):
        collector = Collector()
        for micros in (1000, 2000, 3000):
            collector.collect(Duration.from_micros(micros), Duration.from_micros(10))

        assert collector.mean() == pytest.approx(0.002)
        assert collector.max() == pytest.approx(0.003)
        assert collector.quantile(0.5) == pytest.approx(0.002)
