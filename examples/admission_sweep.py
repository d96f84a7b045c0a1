"""Admission control under rising load.

Sweeps the producer rate from well below to well above the consumer's
capacity and shows how the concurrency limit shapes tail latency and backlog.

## Architecture Diagram

```
    +----------+        +-------------------------+        +----------------+
    | Producer |------->|       Dispatcher        |------->|    Consumer    |
    | (rate R) |        | backlog (FIFO)          |        | FIFO, 1/C per  |
    +----------+        | admits while in-service |        | completion     |
                        | < limit, every goal     |        +----------------+
                        +-------------------------+                |
                                                                   v
                                                             Collector
                                                         (p50/p95/p99/max)
```

## What to expect

limit = floor(goal * factor / (1 / C)). With C = 1000/s, a 2ms goal and the
default factor 1.5 the consumer holds at most 3 requests. Below capacity the
backlog stays near zero and latency stays near the goal. Above capacity the
dispatcher keeps the consumer busy at its own rate, the excess piles up in the
backlog, and total latency grows with the run length while execution latency
stays bounded by the limit.
"""

from __future__ import annotations

from pathlib import Path

import admissionsim
from admissionsim import Duration, SimulationConfig, rate_grid, run_sweep


def build_base_config(duration_s: int, consumer_rate: float, goal_us: float, seed: int | None) -> SimulationConfig:
    return SimulationConfig(
        duration_s=duration_s,
        producer_rate=consumer_rate,
        consumer_rate=consumer_rate,
        producer_process="poisson",
        dispatcher_process="uniform",
        consumer_process="exp-delay",
        latency_goal=Duration.from_micros(goal_us),
        quantum=Duration.from_micros(10),
        seed=seed,
    )


def visualize_results(results, output_dir: Path) -> None:
    """Plot latency percentiles and peak backlog against producer rate."""
    import matplotlib.pyplot as plt

    output_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    for column, style in (("p50", "g-o"), ("p95", "b-o"), ("p99", "r-o"), ("exec_p99", "k--")):
        ax1.plot(results["producer_rate"], results[column] * 1000, style, label=column)
    ax1.set_ylabel("Latency (ms)")
    ax1.set_yscale("log")
    ax1.set_title("Latency vs producer rate")
    ax1.legend(loc="upper left")
    ax1.grid(True, alpha=0.3)

    ax2.plot(results["producer_rate"], results["max_backlog"], "m-o", label="max backlog")
    ax2.plot(results["producer_rate"], results["max_in_service"], "c-o", label="max in service")
    ax2.set_xlabel("Producer rate (req/s)")
    ax2.set_ylabel("Requests")
    ax2.legend(loc="upper left")
    ax2.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_dir / "admission_sweep.png", dpi=120)
    plt.close(fig)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Admission control sweep")
    parser.add_argument("--duration", type=int, default=2, help="Simulated seconds per run")
    parser.add_argument("--consumer-rate", type=float, default=1000.0, help="Consumer rate (req/s)")
    parser.add_argument("--goal-us", type=float, default=2000.0, help="Latency goal (microseconds)")
    parser.add_argument("--steps", type=int, default=8, help="Number of producer rates")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (use -1 for random)")
    parser.add_argument("--output", type=str, default="output/admission_sweep", help="Output directory")
    parser.add_argument("--no-viz", action="store_true", help="Skip visualization generation")
    args = parser.parse_args()

    admissionsim.enable_console_logging(level="INFO")

    seed = None if args.seed == -1 else args.seed
    base = build_base_config(args.duration, args.consumer_rate, args.goal_us, seed)
    rates = rate_grid(0.5 * args.consumer_rate, 1.5 * args.consumer_rate, args.steps)

    results = run_sweep(base, rates)
    print(results.to_string(index=False))

    if not args.no_viz:
        output_dir = Path(args.output)
        visualize_results(results, output_dir)
        print(f"\nVisualizations saved to: {output_dir.absolute()}")
