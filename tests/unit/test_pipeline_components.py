"""Unit tests for the consumer, dispatcher and producer stages."""

import logging

import pytest

from admissionsim import (
    Collector,
    ConfigurationError,
    Consumer,
    Dispatcher,
    Duration,
    Instant,
    Producer,
    Request,
    concurrency_limit,
)

MS = Duration.from_micros(1000)


def at_ms(ms: float) -> Instant:
    return Instant.Epoch + Duration.from_micros(ms * 1000)


def dispatched_request(start: Instant, dispatch: Instant) -> Request:
    request = Request(start)
    request.dispatch = dispatch
    return request


@pytest.fixture
def collector() -> Collector:
    return Collector()


@pytest.fixture
def consumer(collector) -> Consumer:
    return Consumer(1000, collector)


@pytest.fixture
def dispatcher(consumer) -> Dispatcher:
    return Dispatcher(consumer, latency_goal=Duration.from_micros(2000))


class TestRequest:

    def test_new_request_is_not_dispatched(self):
        request = Request(at_ms(3))

        assert request.start == at_ms(3)
        assert request.dispatch is None
        assert not request.is_dispatched

    def test_start_is_read_only(self):
        request = Request(at_ms(3))

        with pytest.raises(AttributeError):
            request.start = at_ms(4)


class TestConsumer:

    def test_latency_is_inverse_rate(self, consumer):
        assert consumer.latency == MS
        assert consumer.rate == 1000.0

    def test_execute_on_empty_schedules_completion(self, consumer):
        consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))

        assert consumer.in_service == 1
        assert consumer.next_epoch == at_ms(1)

    def test_execute_when_busy_keeps_epoch(self, consumer):
        consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))
        consumer.execute(at_ms(0.5), dispatched_request(at_ms(0.5), at_ms(0.5)))

        assert consumer.in_service == 2
        assert consumer.next_epoch == at_ms(1)

    def test_tick_before_epoch_completes_nothing(self, consumer, collector):
        consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))
        consumer.tick(at_ms(0.999))

        assert consumer.processed == 0
        assert collector.count == 0

    def test_tick_at_epoch_completes_head(self, consumer, collector):
        consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))
        consumer.tick(at_ms(1))

        assert consumer.processed == 1
        assert consumer.in_service == 0
        assert collector.total.mean() == 0.001
        assert collector.execution.mean() == 0.001

    def test_records_total_and_execution_latency(self, consumer, collector):
        consumer.execute(at_ms(2), dispatched_request(at_ms(0), at_ms(2)))
        consumer.tick(at_ms(3))

        assert collector.total.max() == 0.003
        assert collector.execution.max() == 0.001

    def test_burst_catch_up_in_one_tick(self, consumer, collector):
        for _ in range(3):
            consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))

        consumer.tick(at_ms(3))

        assert consumer.processed == 3
        assert consumer.in_service == 0
        assert collector.total.max() == 0.003
        assert consumer.next_epoch == at_ms(4)

    def test_completions_follow_fifo_order(self, consumer, collector):
        consumer.execute(at_ms(0), dispatched_request(at_ms(0), at_ms(0)))
        consumer.execute(at_ms(0), dispatched_request(at_ms(-5), at_ms(0)))

        consumer.tick(at_ms(1))
        assert collector.total.max() == 0.001

        consumer.tick(at_ms(2))
        assert collector.total.max() == 0.007

    def test_undispatched_request_skips_execution_latency(self, consumer, collector):
        consumer.execute(at_ms(0), Request(at_ms(0)))
        consumer.tick(at_ms(1))

        assert collector.total.count == 1
        assert collector.execution.count == 0

    def test_invalid_rate_raises(self, collector):
        with pytest.raises(ConfigurationError):
            Consumer(0, collector)

    def test_unknown_process_raises(self, collector):
        with pytest.raises(ConfigurationError):
            Consumer(1000, collector, process="weibull")


class TestConcurrencyLimit:

    def test_goal_2ms(self):
        assert concurrency_limit(Duration.from_micros(2000), 1.5, 1000) == 3

    def test_goal_500us_is_zero(self):
        assert concurrency_limit(Duration.from_micros(500), 1.5, 1000) == 0

    def test_goal_factor_scales_limit(self):
        assert concurrency_limit(Duration.from_micros(2000), 3.0, 1000) == 6

    def test_rate_with_inexact_service_latency(self):
        """1/6000 s is not a whole number of nanoseconds."""
        assert concurrency_limit(Duration.from_micros(2000), 1.5, 6000.0) == 18

    @pytest.mark.parametrize("rate", [3, 6, 7, 9, 11, 13])
    def test_one_second_goal_admits_rate_requests(self, rate):
        assert concurrency_limit(Duration.from_seconds(1), 1.0, float(rate)) == rate

    def test_decimal_goal_factor(self):
        assert concurrency_limit(Duration.from_micros(10_000), 0.7, 1000.0) == 7


class TestDispatcher:

    def test_limit_derived_from_goal(self, dispatcher):
        assert dispatcher.concurrency_limit == 3
        assert dispatcher.latency_goal == Duration.from_micros(2000)
        assert dispatcher.goal_factor == 1.5

    @pytest.mark.parametrize(
        "rate, goal_us, factor, expected",
        [(6000, 2000, 1.5, 18), (7, 1_000_000, 1.0, 7), (13, 1_000_000, 1.0, 13)],
    )
    def test_limit_uses_unrounded_rate(self, rate, goal_us, factor, expected):
        consumer = Consumer(rate, Collector())
        dispatcher = Dispatcher(consumer, latency_goal=Duration.from_micros(goal_us), goal_factor=factor)

        assert dispatcher.concurrency_limit == expected

    def test_default_goal_too_tight_for_slow_consumer(self, consumer):
        with pytest.raises(ConfigurationError, match="Too low consumer rate"):
            Dispatcher(consumer)

    def test_non_positive_goal_factor_raises(self, consumer):
        with pytest.raises(ConfigurationError, match="goal_factor"):
            Dispatcher(consumer, latency_goal=Duration.from_micros(2000), goal_factor=0)

    def test_non_positive_goal_raises(self, consumer):
        with pytest.raises(ConfigurationError, match="latency_goal"):
            Dispatcher(consumer, latency_goal=Duration.ZERO)

    def test_unknown_process_raises(self, consumer):
        with pytest.raises(ConfigurationError, match="unknown process"):
            Dispatcher(consumer, latency_goal=Duration.from_micros(2000), process="lognormal")

    def test_logs_limit(self, consumer, caplog):
        with caplog.at_level(logging.INFO, logger="admissionsim"):
            Dispatcher(consumer, latency_goal=Duration.from_micros(2000))

        assert "Consumer limit 3 requests" in caplog.text

    def test_queue_grows_backlog(self, dispatcher):
        for _ in range(4):
            dispatcher.queue(at_ms(0), Request(at_ms(0)))

        assert dispatcher.backlog == 4
        assert dispatcher.dispatched == 0

    def test_tick_admits_up_to_limit(self, dispatcher, consumer):
        requests = [Request(at_ms(0)) for _ in range(5)]
        for request in requests:
            dispatcher.queue(at_ms(0), request)

        dispatcher.tick(at_ms(0))

        assert dispatcher.dispatched == 3
        assert dispatcher.backlog == 2
        assert consumer.in_service == 3
        assert [r.dispatch for r in requests] == [at_ms(0)] * 3 + [None, None]

    def test_tick_waits_for_pacing_epoch(self, dispatcher, consumer):
        for _ in range(5):
            dispatcher.queue(at_ms(0), Request(at_ms(0)))
        dispatcher.tick(at_ms(0))
        assert dispatcher.next_epoch == at_ms(2)

        consumer.tick(at_ms(1))
        dispatcher.tick(at_ms(1))
        assert consumer.in_service == 2
        assert dispatcher.backlog == 2

        dispatcher.tick(at_ms(2))
        assert consumer.in_service == 3
        assert dispatcher.backlog == 1
        assert dispatcher.dispatched == 4

    def test_custom_pacing_period(self, consumer):
        dispatcher = Dispatcher(consumer, latency_goal=Duration.from_micros(2000), period=Duration.from_micros(250))
        dispatcher.tick(at_ms(0))

        assert dispatcher.next_epoch == at_ms(0.25)

    def test_empty_backlog_tick_is_noop(self, dispatcher, consumer):
        dispatcher.tick(at_ms(0))

        assert dispatcher.dispatched == 0
        assert consumer.in_service == 0


class TestProducer:

    def test_first_arrival_at_time_zero(self, dispatcher):
        producer = Producer(1000, dispatcher)
        producer.tick(at_ms(0))

        assert producer.generated == 1
        assert dispatcher.backlog == 1
        assert producer.next_epoch == at_ms(1)

    def test_no_arrival_between_epochs(self, dispatcher):
        producer = Producer(1000, dispatcher)
        producer.tick(at_ms(0))
        producer.tick(at_ms(0.5))

        assert producer.generated == 1

        producer.tick(at_ms(1))
        assert producer.generated == 2

    def test_catch_up_generates_every_due_arrival(self, dispatcher):
        producer = Producer(1000, dispatcher)
        producer.tick(at_ms(10))

        assert producer.generated == 11
        assert dispatcher.backlog == 11
        assert producer.next_epoch == at_ms(11)

    def test_invalid_rate_raises(self, dispatcher):
        with pytest.raises(ConfigurationError, match="rate must be positive"):
            Producer(-1, dispatcher)

    def test_rate_property(self, dispatcher):
        assert Producer(250, dispatcher, process="poisson", seed=3).rate == 250.0
