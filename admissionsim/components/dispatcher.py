"""Admission control in front of the consumer.

The dispatcher keeps a FIFO backlog of arrived requests and, on its own
pacing cadence, admits them into the consumer while the consumer holds fewer
than ``concurrency_limit`` requests.

The limit comes from Little's law: to keep latency near ``latency_goal`` when
each request costs ``consumer.latency`` of service, at most
``latency_goal / consumer.latency`` requests should be outstanding.
``goal_factor`` adds headroom above that bound:

    limit = floor(latency_goal * goal_factor / consumer.latency)
          = floor(latency_goal * goal_factor * consumer.rate)
"""

from __future__ import annotations

import logging
import math
from collections import deque
from fractions import Fraction

from admissionsim.components.consumer import Consumer
from admissionsim.components.request import Request
from admissionsim.core.temporal import Duration, Instant
from admissionsim.distributions import DEFAULT_CAP_FACTOR, StochasticProcess
from admissionsim.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LATENCY_GOAL = Duration.from_micros(500)
DEFAULT_GOAL_FACTOR = 1.5


def _exact(value: float) -> Fraction:
    # Shortest decimal form, so 0.7 is seven tenths rather than the float below it
    return Fraction(repr(value)) if isinstance(value, float) else Fraction(value)


def concurrency_limit(latency_goal: Duration, goal_factor: float, service_rate: float) -> int:
    """Number of requests that may be in service at once.

    Evaluated exactly from the consumer's rate. Its service latency is
    rounded to the nanosecond and must not be used here.
    """
    ratio = Fraction(latency_goal.nanoseconds, 1_000_000_000) * _exact(goal_factor) * _exact(service_rate)
    return math.floor(ratio)


class Dispatcher:
    """Concurrency-limiting gate between producer and consumer.

    Args:
        consumer: The consumer requests are admitted into.
        latency_goal: Target latency the limit is derived from.
        process: Kind of interval process pacing admission attempts.
        goal_factor: Headroom multiplier on the latency goal.
        period: Base interval between admission attempts. Defaults to the
            latency goal.
        cap_factor: Jitter cap for the ``capped-jitter`` kind.
        seed: Seed for the pacing process.

    Raises:
        ConfigurationError: If the goal or factor is not positive, the process
            kind is unknown, or the derived limit is zero.
    """

    def __init__(
        self,
        consumer: Consumer,
        latency_goal: Duration = DEFAULT_LATENCY_GOAL,
        process: str = "uniform",
        goal_factor: float = DEFAULT_GOAL_FACTOR,
        period: Duration | None = None,
        cap_factor: float = DEFAULT_CAP_FACTOR,
        seed: int | None = None,
    ):
        if latency_goal.nanoseconds <= 0:
            logger.error("Rejected dispatcher with goal %r", latency_goal)
            raise ConfigurationError(f"latency_goal must be positive, got {latency_goal!r}")
        if goal_factor <= 0:
            logger.error("Rejected dispatcher with goal factor %s", goal_factor)
            raise ConfigurationError(f"goal_factor must be positive, got {goal_factor}")

        self._consumer = consumer
        self._latency_goal = latency_goal
        self._goal_factor = float(goal_factor)
        self._limit = concurrency_limit(latency_goal, goal_factor, consumer.rate)

        logger.info(
            "Consumer limit %d requests, goal %.3fms factor %s",
            self._limit, latency_goal.to_seconds() * 1000, goal_factor,
            extra={"concurrency_limit": self._limit},
        )
        if self._limit == 0:
            logger.error(
                "Consumer too slow for goal: service latency %r, goal %r, factor %s",
                consumer.latency, latency_goal, goal_factor,
            )
            raise ConfigurationError(
                "Too low consumer rate: concurrency limit for a "
                f"{latency_goal.to_micros():g}us goal (factor {goal_factor}) is zero"
            )

        self._pace = StochasticProcess(
            process,
            period if period is not None else latency_goal,
            cap_factor=cap_factor,
            seed=seed,
        )
        self._next = Instant.Epoch
        self._queue: deque[Request] = deque()
        self._dispatched = 0

    @property
    def concurrency_limit(self) -> int:
        return self._limit

    @property
    def latency_goal(self) -> Duration:
        return self._latency_goal

    @property
    def goal_factor(self) -> float:
        return self._goal_factor

    @property
    def backlog(self) -> int:
        return len(self._queue)

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def next_epoch(self) -> Instant:
        return self._next

    def queue(self, now: Instant, request: Request) -> None:
        self._queue.append(request)

    def tick(self, now: Instant) -> None:
        if now < self._next:
            return
        self._next = self._next + self._pace.get()

        consumer = self._consumer
        while self._queue and consumer.in_service < self._limit:
            request = self._queue.popleft()
            request.dispatch = now
            consumer.execute(now, request)
            self._dispatched += 1
