"""Canonical records shared across valuation, search and calibration layers."""

from .assets import (
    PICK_POSITION,
    Asset,
    HistoricalOutcome,
    PickAsset,
    PlayerAsset,
    ScoredAsset,
    asset_position,
)
from .calibration import CalibrationMetrics, CalibrationRun, RunStatus
from .config import AgeCurve, AppConfig, ModelWeights, PickValuation
from .settings import SCORING_FORMATS, LeagueSettings, ScoringFormat, StarterSlots
from .team import LeagueSnapshot, LeagueTeam, RiskTolerance, TeamProfile, Timeline

__all__ = [
    "PICK_POSITION",
    "Asset",
    "HistoricalOutcome",
    "PickAsset",
    "PlayerAsset",
    "ScoredAsset",
    "asset_position",
    "CalibrationMetrics",
    "CalibrationRun",
    "RunStatus",
    "AgeCurve",
    "AppConfig",
    "ModelWeights",
    "PickValuation",
    "SCORING_FORMATS",
    "LeagueSettings",
    "ScoringFormat",
    "StarterSlots",
    "LeagueSnapshot",
    "LeagueTeam",
    "RiskTolerance",
    "TeamProfile",
    "Timeline",
]
