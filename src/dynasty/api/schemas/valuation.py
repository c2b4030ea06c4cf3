from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dynasty.models import Asset, ScoredAsset


class ScoreRequest(BaseModel):
    assets: List[Asset] = Field(..., min_length=1)
    settings: Dict[str, Any] | None = None


class ScoredAssetResponse(BaseModel):
    asset_id: str
    label: str
    position: str
    now_score: float
    future_score: float
    composite: float
    age_multiplier: float
    future_age_multiplier: float
    risk_adjustment: float

    @classmethod
    def from_scored(cls, scored: ScoredAsset) -> "ScoredAssetResponse":
        return cls(
            asset_id=scored.asset_id,
            label=scored.label,
            position=scored.position,
            now_score=scored.now_score,
            future_score=scored.future_score,
            composite=scored.composite,
            age_multiplier=scored.age_multiplier,
            future_age_multiplier=scored.future_age_multiplier,
            risk_adjustment=scored.risk_adjustment,
        )


class ScoreResponse(BaseModel):
    settings_summary: str
    config_version: int
    assets: List[ScoredAssetResponse]


class TradeEvaluateRequest(BaseModel):
    team_a: List[Asset] = Field(default_factory=list)
    team_b: List[Asset] = Field(default_factory=list)
    settings: Dict[str, Any] | None = None


class TradeSideResponse(BaseModel):
    now_score: float
    future_score: float
    composite: float
    assets: List[ScoredAssetResponse]


class TradeEvaluateResponse(BaseModel):
    team_a: TradeSideResponse
    team_b: TradeSideResponse
    percent_difference: float
    verdict: str
    explanation: str
    suggestion: Optional[str] = None
    now_delta: float
    future_delta: float
