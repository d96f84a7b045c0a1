from __future__ import annotations

from admissionsim.components.dispatcher import Dispatcher
from admissionsim.components.request import Request
from admissionsim.core.temporal import Instant
from admissionsim.distributions import DEFAULT_CAP_FACTOR, StochasticProcess


class Producer:
    """Arrival generator feeding the dispatcher's backlog.

    The first arrival happens at time zero. When a single tick spans several
    arrival intervals, every due arrival is still generated in that tick.

    Args:
        rate: Arrivals per second (mean rate for stochastic kinds).
        dispatcher: Destination for new requests.
        process: Kind of arrival process.
        cap_factor: Jitter cap for the ``capped-jitter`` kind.
        seed: Seed for the arrival process.
    """

    def __init__(
        self,
        rate: float,
        dispatcher: Dispatcher,
        process: str = "uniform",
        cap_factor: float = DEFAULT_CAP_FACTOR,
        seed: int | None = None,
    ):
        self._pace = StochasticProcess.from_rate(process, rate, cap_factor=cap_factor, seed=seed)
        self._rate = float(rate)
        self._dispatcher = dispatcher
        self._next = Instant.Epoch
        self._generated = 0

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def generated(self) -> int:
        return self._generated

    @property
    def next_epoch(self) -> Instant:
        return self._next

    def tick(self, now: Instant) -> None:
        while now >= self._next:
            self._next = self._next + self._pace.get()
            self._dispatcher.queue(now, Request(now))
            self._generated += 1
