"""Latency collection, timelines and run summaries."""

from admissionsim.instrumentation.collectors import Collector, LatencyAccumulator
from admissionsim.instrumentation.data import Data
from admissionsim.instrumentation.summary import LatencySummary, SimulationSummary

__all__ = [
    "Collector",
    "Data",
    "LatencyAccumulator",
    "LatencySummary",
    "SimulationSummary",
]
