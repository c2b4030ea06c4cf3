"""Default scoring configuration used until a calibrated one is activated."""

from __future__ import annotations

from typing import Dict

from dynasty.models import AgeCurve, AppConfig, ModelWeights, PickValuation


DEFAULT_SEASON = 2026

DEFAULT_WEIGHTS = ModelWeights(alpha=0.4, wM_now=0.6, wP_now=0.4, wM_future=0.4, wP_future=0.6)

# Near-term production decay.
DEFAULT_AGE_CURVES: Dict[str, AgeCurve] = {
    "QB": AgeCurve(breakpoints=(26, 30, 35), multipliers=(1.0, 0.95, 0.85, 0.7)),
    "RB": AgeCurve(breakpoints=(23, 26, 29), multipliers=(1.0, 0.9, 0.7, 0.5)),
    "WR": AgeCurve(breakpoints=(24, 27, 30), multipliers=(1.0, 0.95, 0.85, 0.7)),
    "TE": AgeCurve(breakpoints=(25, 28, 31), multipliers=(1.0, 0.95, 0.8, 0.6)),
}

# Multi-year potential; more breakpoints with smaller steps.
DEFAULT_FUTURE_AGE_CURVES: Dict[str, AgeCurve] = {
    "QB": AgeCurve(breakpoints=(27, 30, 33, 36), multipliers=(1.0, 0.95, 0.85, 0.7, 0.55)),
    "RB": AgeCurve(breakpoints=(24, 26, 28, 30), multipliers=(1.0, 0.85, 0.65, 0.45, 0.3)),
    "WR": AgeCurve(breakpoints=(25, 27, 29, 31), multipliers=(1.0, 0.92, 0.8, 0.65, 0.5)),
    "TE": AgeCurve(breakpoints=(26, 28, 30, 32), multipliers=(1.0, 0.92, 0.8, 0.65, 0.5)),
}

DEFAULT_SCORING_MULTIPLIERS: Dict[str, float] = {
    "PPR": 1.0,
    "Half": 0.85,
    "Standard": 0.7,
}


def default_app_config(season: int = DEFAULT_SEASON) -> AppConfig:
    """Return the active configuration shipped with the engine."""

    return AppConfig(
        version=1,
        status="active",
        rollout_percentage=100.0,
        weights=DEFAULT_WEIGHTS,
        age_curves=DEFAULT_AGE_CURVES,
        future_age_curves=DEFAULT_FUTURE_AGE_CURVES,
        scoring_multipliers=DEFAULT_SCORING_MULTIPLIERS,
        picks=PickValuation(season=season),
    )
