from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dynasty.models import AppConfig, CalibrationRun, HistoricalOutcome


class CalibrationRunRequest(BaseModel):
    outcomes: List[HistoricalOutcome] = Field(default_factory=list)
    settings: Dict[str, Any] | None = None
    previous_positions: List[str] | None = None


class DriftAlertResponse(BaseModel):
    kind: str
    severity: str
    metric: str
    value: float
    threshold: float
    message: str
    position: Optional[str] = None


class CalibrationRunResponse(BaseModel):
    run: CalibrationRun
    alerts: List[DriftAlertResponse] = Field(default_factory=list)


class ConfigResponse(BaseModel):
    active: AppConfig
    candidate: Optional[AppConfig] = None
