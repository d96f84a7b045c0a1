"""Fixed-timestep simulation driver.

The driver owns the clock and the three pipeline stages. Each step ticks
them at the current instant in a fixed order, then advances time by one
quantum:

    1. Consumer   - completes due requests, freeing capacity
    2. Producer   - generates due arrivals into the backlog
    3. Dispatcher - admits from the backlog up to the concurrency limit

The order is part of the model: the dispatcher sees capacity the consumer
just freed and arrivals the producer just created. Reordering changes the
results, so regression tests pin it down.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable

from admissionsim.components import Consumer, Dispatcher, Producer
from admissionsim.config import SimulationConfig
from admissionsim.core.temporal import Instant
from admissionsim.instrumentation import Collector, Data, SimulationSummary

logger = logging.getLogger(__name__)

TickObserver = Callable[["Simulation"], None]


class SimulationPhase(Enum):
    RUNNING = "running"
    FINISHED = "finished"


class Simulation:
    """One run of the producer -> dispatcher -> consumer pipeline.

    Args:
        config: Run parameters. Construction builds every stage, so any
            ConfigurationError surfaces here, before time starts.

    Example:
        config = SimulationConfig(duration_s=2, producer_rate=800, consumer_rate=1000,
                                  latency_goal=Duration.from_micros(2000))
        summary = Simulation(config).run()
        print(summary.total_latency.p99)
    """

    def __init__(self, config: SimulationConfig):
        self.config = config
        seeds = config.process_seeds()

        self.collector = Collector(track_execution=config.track_execution)
        self.consumer = Consumer(
            config.consumer_rate,
            self.collector,
            process=config.consumer_process,
            cap_factor=config.cap_factor,
            seed=seeds["consumer"],
        )
        self.dispatcher = Dispatcher(
            self.consumer,
            latency_goal=config.latency_goal,
            process=config.dispatcher_process,
            goal_factor=config.goal_factor,
            period=config.dispatch_period,
            cap_factor=config.cap_factor,
            seed=seeds["dispatcher"],
        )
        self.producer = Producer(
            config.producer_rate,
            self.dispatcher,
            process=config.producer_process,
            cap_factor=config.cap_factor,
            seed=seeds["producer"],
        )

        self._now = Instant.Epoch
        self._end = Instant.from_seconds(config.duration_s)
        self._quantum = config.quantum
        self._phase = SimulationPhase.RUNNING
        self._steps = 0

        self._max_backlog = 0
        self._max_in_service = 0
        self._observers: list[TickObserver] = []

        self._sample_interval = config.sample_interval
        self._next_sample = Instant.Epoch
        self.timeline: dict[str, Data] = {
            name: Data(name)
            for name in ("backlog", "in_service", "generated_rate", "dispatched_rate", "processed_rate")
        }

    @property
    def now(self) -> Instant:
        """The instant the next step will simulate."""
        return self._now

    @property
    def phase(self) -> SimulationPhase:
        return self._phase

    @property
    def is_finished(self) -> bool:
        return self._phase is SimulationPhase.FINISHED

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def max_backlog(self) -> int:
        return self._max_backlog

    @property
    def max_in_service(self) -> int:
        return self._max_in_service

    def add_observer(self, observer: TickObserver) -> None:
        """Call ``observer(simulation)`` after every step's three ticks.

        Observers see the state at the end of the step, before the clock
        advances. They must not mutate the pipeline.
        """
        self._observers.append(observer)

    def step(self) -> bool:
        """Simulate one instant and advance the clock.

        Returns:
            True while the simulation is still running afterwards.
        """
        if self._phase is SimulationPhase.FINISHED:
            return False

        now = self._now
        self.consumer.tick(now)
        self.producer.tick(now)
        self.dispatcher.tick(now)
        self._steps += 1

        backlog = self.dispatcher.backlog
        if backlog > self._max_backlog:
            self._max_backlog = backlog
        in_service = self.consumer.in_service
        if in_service > self._max_in_service:
            self._max_in_service = in_service

        for observer in self._observers:
            observer(self)

        if now >= self._next_sample:
            self._sample(now)
            self._next_sample = self._next_sample + self._sample_interval

        self._now = now + self._quantum
        if self._now > self._end:
            self._phase = SimulationPhase.FINISHED
        return self._phase is SimulationPhase.RUNNING

    def _sample(self, now: Instant) -> None:
        elapsed = now.to_seconds()
        backlog = self.dispatcher.backlog
        self.timeline["backlog"].add_stat(backlog, now)
        self.timeline["in_service"].add_stat(self.consumer.in_service, now)

        rates = {
            "generated_rate": self.producer.generated,
            "dispatched_rate": self.dispatcher.dispatched,
            "processed_rate": self.consumer.processed,
        }
        for name, total in rates.items():
            self.timeline[name].add_stat(total / elapsed if elapsed > 0 else 0.0, now)

        if elapsed > 0:
            logger.debug(
                "%8.3fs  queued %d/%d  g %.0f  d %.0f  c %.0f",
                elapsed, backlog, self._max_backlog,
                self.producer.generated / elapsed,
                self.dispatcher.dispatched / elapsed,
                self.consumer.processed / elapsed,
                extra={"sim_time_s": elapsed, "backlog": backlog, "in_service": self.consumer.in_service},
            )

    def run(self) -> SimulationSummary:
        """Step until the configured duration has been simulated."""
        config = self.config
        logger.info(
            "Simulation started: %ds, producer %s@%s/s, dispatcher %s, consumer %s@%s/s, limit %d",
            config.duration_s,
            config.producer_process, config.producer_rate,
            config.dispatcher_process,
            config.consumer_process, config.consumer_rate,
            self.dispatcher.concurrency_limit,
        )
        wall_start = time.monotonic()

        while self.step():
            pass

        logger.info(
            "Simulation finished after %d steps (%.2fs wall): generated=%d dispatched=%d processed=%d",
            self._steps, time.monotonic() - wall_start,
            self.producer.generated, self.dispatcher.dispatched, self.consumer.processed,
        )
        return self.summary()

    def summary(self) -> SimulationSummary:
        """Aggregates of the run so far."""
        execution = self.collector.execution
        return SimulationSummary(
            duration_s=float(self.config.duration_s),
            producer_rate=self.producer.rate,
            consumer_rate=self.consumer.rate,
            concurrency_limit=self.dispatcher.concurrency_limit,
            generated=self.producer.generated,
            dispatched=self.dispatcher.dispatched,
            processed=self.consumer.processed,
            max_backlog=self._max_backlog,
            max_in_service=self._max_in_service,
            final_backlog=self.dispatcher.backlog,
            final_in_service=self.consumer.in_service,
            total_latency=self.collector.total.summary(),
            execution_latency=execution.summary() if execution is not None else None,
        )


def simulate(config: SimulationConfig) -> SimulationSummary:
    """Build and run a simulation in one call."""
    return Simulation(config).run()
