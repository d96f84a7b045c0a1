"""Single-server FIFO consumer.

Completions are paced by the consumer's own interval process rather than by
a per-request service time: each time a completion epoch fires, whichever
request sits at the head of the queue finishes. This models an M/G/1-style
server through the cadence of departures.
"""

from __future__ import annotations

import logging
from collections import deque

from admissionsim.components.request import Request
from admissionsim.core.temporal import Duration, Instant
from admissionsim.distributions import DEFAULT_CAP_FACTOR, StochasticProcess
from admissionsim.instrumentation.collectors import Collector

logger = logging.getLogger(__name__)


class Consumer:
    """Executes admitted requests and reports their latencies.

    Args:
        rate: Service rate in requests per second. The base per-request
            service latency is ``1 / rate``.
        collector: Receives the latencies of completed requests.
        process: Kind of interval process pacing completions.
        cap_factor: Jitter cap for the ``capped-jitter`` kind.
        seed: Seed for the pacing process.

    Raises:
        ConfigurationError: If the rate is not positive or the process kind
            is unknown.
    """

    def __init__(
        self,
        rate: float,
        collector: Collector,
        process: str = "uniform",
        cap_factor: float = DEFAULT_CAP_FACTOR,
        seed: int | None = None,
    ):
        self._pace = StochasticProcess.from_rate(process, rate, cap_factor=cap_factor, seed=seed)
        self._rate = float(rate)
        self._collector = collector
        self._executing: deque[Request] = deque()
        self._next = Instant.Epoch
        self._processed = 0

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def latency(self) -> Duration:
        """Base per-request service latency."""
        return self._pace.period

    @property
    def in_service(self) -> int:
        return len(self._executing)

    @property
    def processed(self) -> int:
        return self._processed

    @property
    def next_epoch(self) -> Instant:
        return self._next

    def execute(self, now: Instant, request: Request) -> None:
        if not self._executing:
            self._next = now + self._pace.get()
        self._executing.append(request)

    def tick(self, now: Instant) -> None:
        completed = 0
        while self._executing and now >= self._next:
            request = self._executing.popleft()
            execution = now - request.dispatch if request.dispatch is not None else None
            self._collector.collect(now - request.start, execution)
            self._processed += 1
            self._next = self._next + self._pace.get()
            completed += 1

        if completed > 1:
            logger.debug("Consumer caught up %d completions at %r", completed, now)
