"""Calibration run records."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from .config import AppConfig


RunStatus = Literal["pending", "running", "completed", "failed"]

TERMINAL_STATUSES = frozenset({"completed", "failed"})


class CalibrationMetrics(BaseModel):
    overall_rho: Optional[float] = None
    per_position_rho: Dict[str, float] = Field(default_factory=dict)
    baseline_rho: Optional[float] = None
    sample_size: int = 0
    significant_rank_shifts: Dict[str, int] = Field(default_factory=dict)


class CalibrationRun(BaseModel):
    run_id: str
    status: RunStatus = "pending"
    metrics: CalibrationMetrics = Field(default_factory=CalibrationMetrics)
    started_at: datetime
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    candidate_config: Optional[AppConfig] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
