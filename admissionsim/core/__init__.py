"""Simulated time primitives."""

from admissionsim.core.temporal import Duration, Instant

__all__ = [
    "Duration",
    "Instant",
]
