"""admissionsim: latency-goal admission control, evaluated by simulation.

Simulates a producer -> dispatcher -> consumer pipeline in fixed 1 us steps.
The dispatcher caps the number of in-flight requests at a limit derived from
a latency goal; the run reports the resulting queueing and tail latency.

Example:
    from admissionsim import Duration, SimulationConfig, simulate

    summary = simulate(SimulationConfig(
        duration_s=2,
        producer_rate=800,
        consumer_rate=1000,
        latency_goal=Duration.from_micros(2000),
    ))
    print(summary.max_in_service, summary.total_latency.p99)
"""

import logging

from admissionsim.analysis import rate_grid, run_sweep
from admissionsim.components import (
    Consumer,
    Dispatcher,
    Producer,
    Request,
    concurrency_limit,
)
from admissionsim.config import SimulationConfig
from admissionsim.core import Duration, Instant
from admissionsim.distributions import ProcessKind, StochasticProcess
from admissionsim.errors import ConfigurationError
from admissionsim.instrumentation import (
    Collector,
    Data,
    LatencyAccumulator,
    LatencySummary,
    SimulationSummary,
)
from admissionsim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from admissionsim.simulation import Simulation, SimulationPhase, simulate
from admissionsim.sketching import ExtendedPSquare

# Library is silent unless the application configures logging
logging.getLogger("admissionsim").addHandler(logging.NullHandler())

__all__ = [
    # Time
    "Duration",
    "Instant",
    # Pipeline
    "Collector",
    "Consumer",
    "Dispatcher",
    "Producer",
    "Request",
    "concurrency_limit",
    # Processes
    "ProcessKind",
    "StochasticProcess",
    # Statistics
    "Data",
    "ExtendedPSquare",
    "LatencyAccumulator",
    "LatencySummary",
    "SimulationSummary",
    # Driver
    "ConfigurationError",
    "Simulation",
    "SimulationConfig",
    "SimulationPhase",
    "simulate",
    # Sweeps
    "rate_grid",
    "run_sweep",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
