"""Parameter sweeps over producer rate.

A single run answers "what happens at this load?". Design exploration needs
the curve: how p99 latency and backlog respond as the producer rate climbs
past the consumer's capacity. run_sweep runs one simulation per rate and
returns one DataFrame row per run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np
import pandas as pd

from admissionsim.config import SimulationConfig
from admissionsim.instrumentation.summary import SimulationSummary
from admissionsim.simulation import simulate

logger = logging.getLogger(__name__)

SWEEP_COLUMNS = [
    "producer_rate",
    "consumer_rate",
    "concurrency_limit",
    "generated",
    "dispatched",
    "processed",
    "max_backlog",
    "max_in_service",
    "mean",
    "p50",
    "p95",
    "p99",
    "max",
    "exec_mean",
    "exec_p99",
]


def rate_grid(low: float, high: float, steps: int) -> list[float]:
    """Evenly spaced producer rates from low to high inclusive."""
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    if steps == 1:
        return [float(low)]
    return [float(rate) for rate in np.linspace(low, high, steps)]


def summary_row(summary: SimulationSummary) -> dict:
    """Flatten a summary into one sweep row (latencies in seconds)."""
    row = {
        "producer_rate": summary.producer_rate,
        "consumer_rate": summary.consumer_rate,
        "concurrency_limit": summary.concurrency_limit,
        "generated": summary.generated,
        "dispatched": summary.dispatched,
        "processed": summary.processed,
        "max_backlog": summary.max_backlog,
        "max_in_service": summary.max_in_service,
    }
    total = summary.total_latency
    for key in ("mean", "p50", "p95", "p99", "max"):
        row[key] = getattr(total, key) if total is not None else np.nan
    execution = summary.execution_latency
    row["exec_mean"] = execution.mean if execution is not None else np.nan
    row["exec_p99"] = execution.p99 if execution is not None else np.nan
    return row


def run_sweep(base: SimulationConfig, producer_rates: Iterable[float]) -> pd.DataFrame:
    """Run ``base`` once per producer rate.

    Args:
        base: Template configuration; only ``producer_rate`` varies.
        producer_rates: Rates to simulate, in the order given.

    Returns:
        DataFrame with one row per rate and the columns in SWEEP_COLUMNS.
    """
    rows = []
    for rate in producer_rates:
        config = base.with_overrides(producer_rate=float(rate))
        logger.info("Sweep run: producer_rate=%s", rate)
        rows.append(summary_row(simulate(config)))
    return pd.DataFrame(rows, columns=SWEEP_COLUMNS)
