"""Multi-run analysis helpers."""

from admissionsim.analysis.sweep import SWEEP_COLUMNS, rate_grid, run_sweep, summary_row

__all__ = [
    "SWEEP_COLUMNS",
    "rate_grid",
    "run_sweep",
    "summary_row",
]
