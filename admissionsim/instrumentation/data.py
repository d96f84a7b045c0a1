"""Time-series storage for periodically sampled simulation metrics.

The simulation driver samples backlog depth, in-service count and the
pipeline's cumulative rates once per sample interval and appends them here.
One sample per interval keeps the series small regardless of run length.
"""

from __future__ import annotations

from typing import Any, List, Tuple

import numpy as np

from admissionsim.core.temporal import Instant


class Data:
    """Container for timestamped metric samples with analysis utilities.

    Stores (time_seconds, value) pairs in append order. The driver always
    appends with non-decreasing times.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._samples: List[Tuple[float, Any]] = []

    def add_stat(self, value: Any, time: Instant) -> None:
        """Record a data point at the given simulation time."""
        self._samples.append((time.to_seconds(), value))

    def clear(self) -> None:
        self._samples.clear()

    @property
    def values(self) -> List[Tuple[float, Any]]:
        """All recorded samples as (time_seconds, value) tuples."""
        return self._samples

    def between(self, start_s: float, end_s: float) -> Data:
        """Return a new Data with samples in [start, end)."""
        result = Data(self.name)
        result._samples = [(t, v) for t, v in self._samples if start_s <= t < end_s]
        return result

    # === Aggregations ===

    def mean(self) -> float:
        """Mean of sample values. Returns 0.0 if empty."""
        if not self._samples:
            return 0.0
        return float(np.mean(self.raw_values()))

    def max(self) -> float:
        """Maximum sample value. Returns 0.0 if empty."""
        if not self._samples:
            return 0.0
        return float(np.max(self.raw_values()))

    def count(self) -> int:
        return len(self._samples)

    def slope(self) -> float:
        """Least-squares growth rate of the values, per simulated second.

        Returns 0.0 with fewer than two samples.
        """
        if len(self._samples) < 2:
            return 0.0
        times = np.asarray(self.times(), dtype=float)
        vals = np.asarray(self.raw_values(), dtype=float)
        gradient, _intercept = np.polyfit(times, vals, 1)
        return float(gradient)

    # === Convenience ===

    def times(self) -> list[float]:
        return [t for t, _ in self._samples]

    def raw_values(self) -> list[Any]:
        return [v for _, v in self._samples]

    def __len__(self) -> int:
        return len(self._samples)

    def __bool__(self) -> bool:
        return len(self._samples) > 0

    def __repr__(self) -> str:
        return f"Data({self.name!r}, samples={len(self._samples)})"
