"""Base protocols for streaming statistics.

Sketches answer questions about an unbounded stream of samples using a fixed
amount of memory. They trade exact answers for bounded space, which is what a
collector fed one latency per completed request needs.

- Sketch: common operations (add, merge, clear, size accounting)
- QuantileSketch: quantile/percentile estimation
"""

from abc import ABC, abstractmethod


class Sketch(ABC):
    """Base protocol for all streaming sketches."""

    @abstractmethod
    def add(self, value: float, count: int = 1) -> None:
        """Add a sample to the sketch.

        Args:
            value: The sample to add.
            count: Number of occurrences to add (default 1).
        """

    @abstractmethod
    def merge(self, other: "Sketch") -> None:
        """Merge another sketch of the same type into this one.

        Raises:
            TypeError: If the sketches cannot be combined.
        """

    @property
    @abstractmethod
    def memory_bytes(self) -> int:
        """Approximate memory footprint of the sketch data structures."""

    @property
    @abstractmethod
    def item_count(self) -> int:
        """Total count of samples added via add()."""

    @abstractmethod
    def clear(self) -> None:
        """Reset the sketch to its initial empty state."""


class QuantileSketch(Sketch):
    """Protocol for sketches that estimate quantiles/percentiles.

    Used for latency percentiles (p50, p95, p99) without storing every
    sample.

    Implementations: ExtendedPSquare
    """

    @abstractmethod
    def quantile(self, q: float) -> float:
        """Estimate the value at a given quantile.

        Args:
            q: Quantile to estimate (0.0 to 1.0).

        Raises:
            ValueError: If q is not in [0, 1] or nothing has been added.
        """

    def percentile(self, p: float) -> float:
        """Convenience wrapper taking a percentile in [0, 100]."""
        if not 0 <= p <= 100:
            raise ValueError(f"Percentile must be in [0, 100], got {p}")
        return self.quantile(p / 100.0)
