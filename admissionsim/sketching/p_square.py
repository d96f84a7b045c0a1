"""Extended P-square (P^2) quantile estimation.

The P^2 algorithm estimates quantiles of a stream without storing it. It
keeps a handful of "markers" whose heights approximate the stream's order
statistics at fixed cumulative probabilities, and nudges each marker towards
its ideal position as samples arrive using piecewise-parabolic interpolation.
The extended form tracks several quantiles at once with 2m + 3 markers for m
target probabilities: the targets themselves, the midpoints between them,
and the two extremes.

Key properties:
- Space: O(m) floats, independent of the number of samples
- Update: O(m)
- Query: O(m)
- Marker heights stay ordered, so estimates never cross (p50 <= p95 <= p99)
  and the last marker is the exact maximum.

Reference:
    Jain, Chlamtac. "The P^2 Algorithm for Dynamic Calculation of Quantiles
    and Histograms Without Storing Observations" (1985)
    Raatikainen. "Simultaneous estimation of several percentiles" (1987)
"""

from __future__ import annotations

import bisect
import sys
from collections.abc import Sequence

from admissionsim.sketching.base import QuantileSketch

DEFAULT_PROBABILITIES = (0.5, 0.95, 0.99)


def _marker_probabilities(probabilities: Sequence[float]) -> list[float]:
    """Targets interleaved with their midpoints, bracketed by 0 and 1."""
    markers = [0.0]
    previous = 0.0
    for p in probabilities:
        markers.append((previous + p) / 2)
        markers.append(p)
        previous = p
    markers.append((previous + 1.0) / 2)
    markers.append(1.0)
    return markers


class ExtendedPSquare(QuantileSketch):
    """Streaming estimator for a fixed set of quantiles.

    Until as many samples as markers have been seen the sketch simply keeps
    them and answers exactly. After that it holds only the marker heights and
    positions.

    Args:
        probabilities: Quantiles to track, each strictly between 0 and 1.

    Example:
        sketch = ExtendedPSquare((0.5, 0.95, 0.99))
        for latency in latencies:
            sketch.add(latency)
        p99 = sketch.quantile(0.99)
    """

    def __init__(self, probabilities: Sequence[float] = DEFAULT_PROBABILITIES):
        probs = sorted(set(float(p) for p in probabilities))
        if not probs:
            raise ValueError("at least one probability is required")
        for p in probs:
            if not 0.0 < p < 1.0:
                raise ValueError(f"probabilities must be in (0, 1), got {p}")

        self._probabilities = tuple(probs)
        self._marker_probs = _marker_probabilities(probs)
        self._marker_count = len(self._marker_probs)

        self._heights: list[float] = []
        self._positions: list[int] = []
        self._desired: list[float] = []
        self._initial: list[float] = []
        self._total_count = 0

    @property
    def probabilities(self) -> tuple[float, ...]:
        """The quantiles this sketch tracks directly."""
        return self._probabilities

    @property
    def marker_count(self) -> int:
        return self._marker_count

    @property
    def markers(self) -> list[float]:
        """Current marker heights, lowest first (empty while warming up)."""
        return list(self._heights)

    def add(self, value: float, count: int = 1) -> None:
        """Add a sample.

        Raises:
            ValueError: If count is negative.
        """
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        for _ in range(count):
            self._add_one(float(value))

    def _add_one(self, x: float) -> None:
        self._total_count += 1

        if not self._heights:
            self._initial.append(x)
            if len(self._initial) == self._marker_count:
                self._initialise_markers()
            return

        heights = self._heights
        last = self._marker_count - 1

        # Locate the cell containing x, stretching the extremes if needed
        if x < heights[0]:
            heights[0] = x
            k = 0
        elif x >= heights[last]:
            heights[last] = x
            k = last - 1
        else:
            k = bisect.bisect_right(heights, x) - 1

        positions = self._positions
        for i in range(k + 1, self._marker_count):
            positions[i] += 1
        desired = self._desired
        for i, dp in enumerate(self._marker_probs):
            desired[i] += dp

        for i in range(1, last):
            self._adjust(i)

    def _initialise_markers(self) -> None:
        self._initial.sort()
        self._heights = list(self._initial)
        self._positions = list(range(1, self._marker_count + 1))
        span = self._marker_count - 1
        self._desired = [1.0 + span * p for p in self._marker_probs]
        self._initial = []

    def _adjust(self, i: int) -> None:
        heights = self._heights
        positions = self._positions
        d = self._desired[i] - positions[i]

        if (d >= 1.0 and positions[i + 1] - positions[i] > 1) or (
            d <= -1.0 and positions[i - 1] - positions[i] < -1
        ):
            step = 1 if d > 0 else -1
            candidate = self._parabolic(i, step)
            if heights[i - 1] < candidate < heights[i + 1]:
                heights[i] = candidate
            else:
                heights[i] = self._linear(i, step)
            positions[i] += step

    def _parabolic(self, i: int, d: int) -> float:
        q = self._heights
        n = self._positions
        return q[i] + d / (n[i + 1] - n[i - 1]) * (
            (n[i] - n[i - 1] + d) * (q[i + 1] - q[i]) / (n[i + 1] - n[i])
            + (n[i + 1] - n[i] - d) * (q[i] - q[i - 1]) / (n[i] - n[i - 1])
        )

    def _linear(self, i: int, d: int) -> float:
        q = self._heights
        n = self._positions
        return q[i] + d * (q[i + d] - q[i]) / (n[i + d] - n[i])

    def quantile(self, q: float) -> float:
        """Estimate the value at quantile ``q``.

        Tracked probabilities return their marker height; other values are
        linearly interpolated between the neighbouring markers.

        Raises:
            ValueError: If q is not in [0, 1] or the sketch is empty.
        """
        if not 0 <= q <= 1:
            raise ValueError(f"Quantile must be in [0, 1], got {q}")
        if self._total_count == 0:
            raise ValueError("Cannot compute quantile of empty sketch")

        if not self._heights:
            return _exact_quantile(sorted(self._initial), q)

        probs = self._marker_probs
        j = bisect.bisect_left(probs, q)
        if j < len(probs) and abs(probs[j] - q) < 1e-12:
            return self._heights[j]
        lo, hi = j - 1, j
        frac = (q - probs[lo]) / (probs[hi] - probs[lo])
        return self._heights[lo] + frac * (self._heights[hi] - self._heights[lo])

    def merge(self, other: "ExtendedPSquare") -> None:
        raise TypeError("P-square sketches cannot be merged; feed both streams into one sketch")

    @property
    def memory_bytes(self) -> int:
        # heights + desired positions (8 bytes), positions (8 bytes), warm-up buffer
        marker_bytes = self._marker_count * 24
        buffer_bytes = len(self._initial) * 8
        return marker_bytes + buffer_bytes + sys.getsizeof(self)

    @property
    def item_count(self) -> int:
        return self._total_count

    def clear(self) -> None:
        self._heights = []
        self._positions = []
        self._desired = []
        self._initial = []
        self._total_count = 0

    def __repr__(self) -> str:
        return (
            f"ExtendedPSquare(probabilities={self._probabilities}, "
            f"items={self._total_count})"
        )


def _exact_quantile(sorted_values: list[float], q: float) -> float:
    """Interpolated quantile of a small, already sorted sample."""
    n = len(sorted_values)
    if n == 1:
        return sorted_values[0]
    pos = q * (n - 1)
    lo = int(pos)
    hi = min(lo + 1, n - 1)
    frac = pos - lo
    return sorted_values[lo] * (1.0 - frac) + sorted_values[hi] * frac
