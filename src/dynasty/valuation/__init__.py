"""Asset valuation: age curves, league adjustments, scoring and trade totals."""

from .age_curve import NEUTRAL_MULTIPLIER, AgeCurveModel
from .engine import (
    RISK_ADJUSTMENTS,
    ScoreComponents,
    ValuationEngine,
    risk_adjustment,
    score,
    score_components,
    score_many,
)
from .settings_adjuster import SUPERFLEX_QB_BONUS, SettingsAdjuster, replacement_rank, scarcity_multiplier
from .trade import SideTotals, TradeEvaluation, evaluate_scored_trade, evaluate_trade

__all__ = [
    "NEUTRAL_MULTIPLIER",
    "AgeCurveModel",
    "RISK_ADJUSTMENTS",
    "ScoreComponents",
    "ValuationEngine",
    "risk_adjustment",
    "score",
    "score_components",
    "score_many",
    "SUPERFLEX_QB_BONUS",
    "SettingsAdjuster",
    "replacement_rank",
    "scarcity_multiplier",
    "SideTotals",
    "TradeEvaluation",
    "evaluate_scored_trade",
    "evaluate_trade",
]
