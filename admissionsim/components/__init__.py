"""Pipeline stages: producer, dispatcher and consumer."""

from admissionsim.components.consumer import Consumer
from admissionsim.components.dispatcher import (
    DEFAULT_GOAL_FACTOR,
    DEFAULT_LATENCY_GOAL,
    Dispatcher,
    concurrency_limit,
)
from admissionsim.components.producer import Producer
from admissionsim.components.request import Request

__all__ = [
    "Consumer",
    "DEFAULT_GOAL_FACTOR",
    "DEFAULT_LATENCY_GOAL",
    "Dispatcher",
    "Producer",
    "Request",
    "concurrency_limit",
]
