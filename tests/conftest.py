"""
Shared pytest fixtures for admissionsim tests.
"""

import logging
from pathlib import Path

import pytest

from admissionsim import Duration, SimulationConfig


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def make_config():
    """Factory for configs with a 2ms goal (limit 3 at 1000/s) and coarse steps.

    A 100us quantum keeps multi-second runs fast; with uniform processes at
    rates whose intervals are multiples of it, every epoch lands on a tick and
    results match the default 1us quantum.
    """

    def _make(**overrides) -> SimulationConfig:
        params = dict(
            duration_s=1,
            producer_rate=500,
            consumer_rate=1000,
            latency_goal=Duration.from_micros(2000),
            quantum=Duration.from_micros(100),
        )
        params.update(overrides)
        return SimulationConfig(**params)

    return _make


@pytest.fixture(autouse=True)
def reset_admissionsim_logging():
    """Reset logging state before each test.

    - Removes all handlers except NullHandler
    - Resets level to NOTSET (inherit from parent)
    """
    logger = logging.getLogger("admissionsim")

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()

    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)

    yield

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        if not isinstance(handler, logging.NullHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
