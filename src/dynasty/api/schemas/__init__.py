"""Pydantic models for API I/O."""

from .calibration import CalibrationRunRequest, CalibrationRunResponse, ConfigResponse, DriftAlertResponse
from .league import LeagueCreatedResponse, ProposalResponse, RankedOpponentResponse
from .team import (
    DepthResponse,
    ImpactResponse,
    RecommendationResponse,
    RecommendationsRequest,
    RosterFlagsResponse,
    TeamAnalyzeRequest,
    TeamAnalyzeResponse,
)
from .valuation import (
    ScoredAssetResponse,
    ScoreRequest,
    ScoreResponse,
    TradeEvaluateRequest,
    TradeEvaluateResponse,
    TradeSideResponse,
)

__all__ = [
    "CalibrationRunRequest",
    "CalibrationRunResponse",
    "ConfigResponse",
    "DriftAlertResponse",
    "LeagueCreatedResponse",
    "ProposalResponse",
    "RankedOpponentResponse",
    "DepthResponse",
    "ImpactResponse",
    "RecommendationResponse",
    "RecommendationsRequest",
    "RosterFlagsResponse",
    "TeamAnalyzeRequest",
    "TeamAnalyzeResponse",
    "ScoredAssetResponse",
    "ScoreRequest",
    "ScoreResponse",
    "TradeEvaluateRequest",
    "TradeEvaluateResponse",
    "TradeSideResponse",
]
