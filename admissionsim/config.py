"""Simulation configuration.

SimulationConfig gathers every knob of a run in one frozen dataclass and
validates it up front, so a bad value fails before any simulated time passes.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace

from admissionsim.components.dispatcher import DEFAULT_GOAL_FACTOR, DEFAULT_LATENCY_GOAL
from admissionsim.core.temporal import Duration
from admissionsim.distributions import DEFAULT_CAP_FACTOR, ProcessKind
from admissionsim.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = Duration.from_micros(1)
DEFAULT_SAMPLE_INTERVAL = Duration.from_seconds(1)


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of one simulation run.

    Attributes:
        duration_s: Simulated seconds to run (integer, at least 1). Time runs
            from 0 up to and including this value.
        producer_rate: Mean arrivals per second.
        consumer_rate: Mean completions per second.
        producer_process: Arrival process kind.
        dispatcher_process: Admission pacing process kind.
        consumer_process: Completion pacing process kind.
        latency_goal: Target latency the concurrency limit is derived from.
        goal_factor: Headroom multiplier on the latency goal.
        cap_factor: Jitter cap for ``capped-jitter`` processes.
        dispatch_period: Base interval between admission attempts; the
            latency goal when None.
        quantum: Fixed step of simulated time.
        sample_interval: Spacing of timeline samples.
        track_execution: Also collect dispatch-to-completion latency.
        seed: Master seed; None makes stochastic processes non-replayable.
    """
    duration_s: int
    producer_rate: float
    consumer_rate: float
    producer_process: str = "uniform"
    dispatcher_process: str = "uniform"
    consumer_process: str = "uniform"
    latency_goal: Duration = DEFAULT_LATENCY_GOAL
    goal_factor: float = DEFAULT_GOAL_FACTOR
    cap_factor: float = DEFAULT_CAP_FACTOR
    dispatch_period: Duration | None = None
    quantum: Duration = DEFAULT_QUANTUM
    sample_interval: Duration = DEFAULT_SAMPLE_INTERVAL
    track_execution: bool = True
    seed: int | None = None

    def __post_init__(self):
        if isinstance(self.duration_s, bool) or not isinstance(self.duration_s, int) or self.duration_s < 1:
            self._reject(f"duration_s must be an integer >= 1, got {self.duration_s!r}")
        if self.producer_rate <= 0:
            self._reject(f"producer_rate must be positive, got {self.producer_rate}")
        if self.consumer_rate <= 0:
            self._reject(f"consumer_rate must be positive, got {self.consumer_rate}")
        for name in (self.producer_process, self.dispatcher_process, self.consumer_process):
            ProcessKind.parse(name)
        if self.goal_factor <= 0:
            self._reject(f"goal_factor must be positive, got {self.goal_factor}")
        if self.cap_factor < 1.0:
            self._reject(f"cap_factor must be >= 1, got {self.cap_factor}")
        for field_name in ("latency_goal", "quantum", "sample_interval"):
            value = getattr(self, field_name)
            if value.nanoseconds <= 0:
                self._reject(f"{field_name} must be positive, got {value!r}")
        if self.dispatch_period is not None and self.dispatch_period.nanoseconds <= 0:
            self._reject(f"dispatch_period must be positive, got {self.dispatch_period!r}")

    @staticmethod
    def _reject(message: str) -> None:
        logger.error("Invalid simulation config: %s", message)
        raise ConfigurationError(message)

    def with_overrides(self, **changes) -> SimulationConfig:
        """Copy of this config with some fields replaced (and re-validated)."""
        return replace(self, **changes)

    def process_seeds(self) -> dict[str, int | None]:
        """Per-stage seeds derived from the master seed.

        Each stage gets its own seed so that no random state is shared, and
        the derivation order is fixed so a seeded run always replays.
        """
        if self.seed is None:
            return {"producer": None, "dispatcher": None, "consumer": None}
        master = random.Random(self.seed)
        return {stage: master.getrandbits(64) for stage in ("producer", "dispatcher", "consumer")}
