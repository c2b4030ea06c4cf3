from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from dynasty.models import Asset, TeamProfile

from .valuation import ScoredAssetResponse


class TeamAnalyzeRequest(BaseModel):
    profile: TeamProfile
    roster: List[Asset] = Field(default_factory=list)
    outgoing: List[str] = Field(default_factory=list)
    incoming: List[Asset] = Field(default_factory=list)


class DepthResponse(BaseModel):
    viable: int
    coverage: float


class RosterFlagsResponse(BaseModel):
    qb_gap: bool
    thin_depth: List[Tuple[str, float]]
    critical_gaps: List[str]
    risk_flags: List[str]
    age_skew: List[str]


class ImpactResponse(BaseModel):
    delta_now: float
    delta_future: float
    delta_composite: float
    timeline_fit: str
    fit_score: float
    flags: List[str]


class TeamAnalyzeResponse(BaseModel):
    team_id: Optional[str] = None
    starters: Dict[str, List[str]]
    lineup_now: float
    lineup_future: float
    now_index: int
    future_index: int
    depth: Dict[str, DepthResponse]
    flags: RosterFlagsResponse
    surplus: List[str]
    needs: List[str]
    impact: Optional[ImpactResponse] = None


class RecommendationsRequest(BaseModel):
    team_a: List[Asset] = Field(default_factory=list)
    team_b: List[Asset] = Field(default_factory=list)
    settings: Dict[str, Any] | None = None
    profile: TeamProfile | None = None
    limit: int | None = Field(default=None, ge=1, le=200)
    give: List[str] = Field(default_factory=list)
    get: List[str] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    action: str
    asset: ScoredAssetResponse
    fit_score: float
    priority: str
    reasoning: str
