"""Simulated time points and spans.

Both types hold an integer count of nanoseconds so that stepping the clock and
comparing epochs never accumulates floating-point error. A run is therefore
reproducible bit for bit, which the regression tests rely on.
"""

from __future__ import annotations

from typing import Union

_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MICRO = 1_000


class Duration:
    """A span of simulated time in nanoseconds."""

    __slots__ = ("nanoseconds",)

    ZERO: Duration

    def __init__(self, nanoseconds: int):
        self.nanoseconds = int(nanoseconds)

    @classmethod
    def from_seconds(cls, seconds: Union[int, float]) -> Duration:
        if isinstance(seconds, int):
            return cls(seconds * _NANOS_PER_SECOND)
        return cls(round(seconds * _NANOS_PER_SECOND))

    @classmethod
    def from_micros(cls, micros: Union[int, float]) -> Duration:
        return cls(round(micros * _NANOS_PER_MICRO))

    def to_seconds(self) -> float:
        return self.nanoseconds / _NANOS_PER_SECOND

    def to_micros(self) -> float:
        return self.nanoseconds / _NANOS_PER_MICRO

    def __add__(self, other: Duration) -> Duration:
        if isinstance(other, Duration):
            return Duration(self.nanoseconds + other.nanoseconds)
        return NotImplemented

    def __sub__(self, other: Duration) -> Duration:
        if isinstance(other, Duration):
            return Duration(self.nanoseconds - other.nanoseconds)
        return NotImplemented

    def __mul__(self, factor: Union[int, float]) -> Duration:
        if isinstance(factor, (int, float)):
            return Duration(round(self.nanoseconds * factor))
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: Duration) -> float:
        """Ratio of two spans, e.g. how many service intervals fit a goal."""
        if isinstance(other, Duration):
            return self.nanoseconds / other.nanoseconds
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds == other.nanoseconds

    def __lt__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds < other.nanoseconds

    def __le__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds <= other.nanoseconds

    def __gt__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds > other.nanoseconds

    def __ge__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds >= other.nanoseconds

    def __hash__(self) -> int:
        return hash(("Duration", self.nanoseconds))

    def __repr__(self) -> str:
        return f"Duration({self.to_seconds():.9f}s)"


class Instant:
    """A point in simulated time, in nanoseconds since the start of the run."""

    __slots__ = ("nanoseconds",)

    Epoch: Instant

    def __init__(self, nanoseconds: int):
        self.nanoseconds = int(nanoseconds)

    @classmethod
    def from_seconds(cls, seconds: Union[int, float]) -> Instant:
        if isinstance(seconds, int):
            return cls(seconds * _NANOS_PER_SECOND)
        return cls(round(seconds * _NANOS_PER_SECOND))

    def to_seconds(self) -> float:
        return self.nanoseconds / _NANOS_PER_SECOND

    def __add__(self, other: Duration) -> Instant:
        if isinstance(other, Duration):
            return Instant(self.nanoseconds + other.nanoseconds)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Instant):
            return Duration(self.nanoseconds - other.nanoseconds)
        if isinstance(other, Duration):
            return Instant(self.nanoseconds - other.nanoseconds)
        return NotImplemented

    # Equality
    def __eq__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds == other.nanoseconds

    # Ordering
    def __lt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds < other.nanoseconds

    def __le__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds <= other.nanoseconds

    def __gt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds > other.nanoseconds

    def __ge__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds >= other.nanoseconds

    def __hash__(self) -> int:
        return hash(("Instant", self.nanoseconds))

    def __repr__(self) -> str:
        return f"Instant({self.to_seconds():.9f}s)"


Duration.ZERO = Duration(0)
Instant.Epoch = Instant(0)

