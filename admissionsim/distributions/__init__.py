"""Interval-generating processes for arrivals, service and pacing."""

from admissionsim.distributions.process_kind import ProcessKind
from admissionsim.distributions.stochastic_process import DEFAULT_CAP_FACTOR, StochasticProcess

__all__ = [
    "DEFAULT_CAP_FACTOR",
    "ProcessKind",
    "StochasticProcess",
]
