"""Interval generators that drive arrivals, service completions and pacing.

A StochasticProcess answers one question, repeatedly: how long until the
next event? The producer asks it for inter-arrival gaps, the consumer for
inter-completion gaps, and the dispatcher for the delay between admission
attempts.

The set of kinds is closed (see ProcessKind), so a single ``get()`` switches
on the kind instead of spreading the behaviour over subclasses.
"""

from __future__ import annotations

import logging
import random

from admissionsim.core.temporal import Duration
from admissionsim.distributions.process_kind import ProcessKind
from admissionsim.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CAP_FACTOR = 3.0


class StochasticProcess:
    """Stateful generator of the next time interval.

    Args:
        kind: Which interval distribution to draw from. Accepts a ProcessKind
            or its configuration name ("uniform", "poisson", "exp-delay",
            "capped-jitter", plus the aliases "expdelay" and "capdelay").
        period: Base interval. For ``poisson`` this is the mean interval.
        cap_factor: Upper multiplier for ``capped-jitter`` (must be >= 1).
        seed: Seed for this process's private random generator. ``None``
            draws from OS entropy, so the sequence is not replayable.

    Raises:
        ConfigurationError: Unknown kind, non-positive period, or a cap
            factor below 1.

    Example:
        pace = StochasticProcess("poisson", Duration.from_micros(500), seed=7)
        gap = pace.get()
    """

    def __init__(
        self,
        kind: str | ProcessKind,
        period: Duration,
        cap_factor: float = DEFAULT_CAP_FACTOR,
        seed: int | None = None,
    ):
        self._kind = ProcessKind.parse(kind)
        if period.nanoseconds <= 0:
            logger.error("Rejected %s process with period %r", self._kind.value, period)
            raise ConfigurationError(f"process period must be positive, got {period!r}")
        if cap_factor < 1.0:
            logger.error("Rejected %s process with cap factor %s", self._kind.value, cap_factor)
            raise ConfigurationError(f"cap_factor must be >= 1, got {cap_factor}")

        self._period = period
        self._period_s = period.to_seconds()
        self._cap_factor = float(cap_factor)
        self._rng = random.Random(seed)

    @classmethod
    def from_rate(
        cls,
        kind: str | ProcessKind,
        rate: float,
        cap_factor: float = DEFAULT_CAP_FACTOR,
        seed: int | None = None,
    ) -> StochasticProcess:
        """Build a process whose base interval is ``1 / rate`` seconds."""
        if rate <= 0:
            logger.error("Rejected %s process with rate %s", kind, rate)
            raise ConfigurationError(f"rate must be positive, got {rate}")
        return cls(kind, Duration.from_seconds(1.0 / rate), cap_factor=cap_factor, seed=seed)

    @property
    def kind(self) -> ProcessKind:
        return self._kind

    @property
    def period(self) -> Duration:
        """Base (for poisson: mean) interval."""
        return self._period

    @property
    def cap_factor(self) -> float:
        return self._cap_factor

    @property
    def is_stochastic(self) -> bool:
        return self._kind is not ProcessKind.UNIFORM

    def get(self) -> Duration:
        """Draw the next interval."""
        kind = self._kind
        if kind is ProcessKind.UNIFORM:
            return self._period
        if kind is ProcessKind.POISSON:
            return Duration.from_seconds(self._rng.expovariate(1.0 / self._period_s))
        if kind is ProcessKind.EXP_DELAY:
            return Duration.from_seconds(self._period_s * (1.0 + self._rng.expovariate(1.0)))
        # CAPPED_JITTER
        return Duration.from_seconds(self._period_s * self._rng.uniform(1.0, self._cap_factor))

    def __repr__(self) -> str:
        return f"StochasticProcess({self._kind.value!r}, period={self._period!r})"
