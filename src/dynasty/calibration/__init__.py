"""Weight calibration against realized outcomes and drift checks."""

from .drift import DriftAlert, assess_drift, mover_share, position_mix_divergence
from .engine import (
    CalibrationEngine,
    InMemoryRunRegistry,
    RunRegistry,
    coordinate_search,
    count_rank_shifts,
    run_calibration,
    spearman_rho,
)

__all__ = [
    "DriftAlert",
    "assess_drift",
    "mover_share",
    "position_mix_divergence",
    "CalibrationEngine",
    "InMemoryRunRegistry",
    "RunRegistry",
    "coordinate_search",
    "count_rank_shifts",
    "run_calibration",
    "spearman_rho",
]
