"""Now/future/composite scoring for individual assets."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

from dynasty.errors import ValidationError
from dynasty.models import AppConfig, LeagueSettings, PickAsset, PlayerAsset, ScoredAsset

from .age_curve import AgeCurveModel
from .settings_adjuster import SettingsAdjuster


MAX_PLAYER_AGE = 60.0

RISK_ADJUSTMENTS: dict[str, float] = {
    "ACTIVE": 1.0,
    "QUESTIONABLE": 0.95,
    "DOUBTFUL": 0.9,
    "OUT": 0.85,
    "IR": 0.8,
    "SUSPENDED": 0.7,
    "RETIRED": 0.0,
}


def risk_adjustment(status: str) -> float:
    return RISK_ADJUSTMENTS.get(status.upper(), 1.0)


@dataclass(frozen=True)
class ScoreComponents:
    """Weight-free pieces of an asset's score.

    ``now = wM_now * now_market + wP_now * now_projection`` and likewise for
    the future score, which lets calibration re-weight without re-scoring.
    """

    asset_id: str
    position: str
    now_market: float
    now_projection: float
    future_market: float
    future_projection: float


def _require_non_negative(field: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValidationError(field, "must be a finite number")
    if value < 0:
        raise ValidationError(field, f"must be non-negative, got {value}")


def _validate_player(asset: PlayerAsset) -> None:
    if not asset.position.strip():
        raise ValidationError("position", "must not be empty")
    if not math.isfinite(asset.age) or asset.age < 0 or asset.age > MAX_PLAYER_AGE:
        raise ValidationError("age", f"must be between 0 and {MAX_PLAYER_AGE:g}, got {asset.age}")
    _require_non_negative("market_value", asset.market_value)
    _require_non_negative("proj_now", asset.proj_now)
    _require_non_negative("proj_future", asset.proj_future)


class ValuationEngine:
    """Score assets under one configuration.

    Instances hold only lookups derived from the configuration they were built
    with; build a new engine whenever the configuration changes.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.now_curves = AgeCurveModel(config.age_curves)
        self.future_curves = AgeCurveModel(config.future_age_curves)
        self.adjuster = SettingsAdjuster(config.scoring_multipliers)

    def pick_value(self, asset: PickAsset) -> float:
        picks = self.config.picks
        if asset.round not in picks.round_multipliers:
            raise ValidationError("round", f"unknown draft round {asset.round}")
        last_year = picks.season + picks.horizon_years
        if asset.year < picks.season or asset.year > last_year:
            raise ValidationError("year", f"pick year {asset.year} outside {picks.season}-{last_year}")
        base = picks.base_value
        if asset.baseline_value is not None:
            _require_non_negative("baseline_value", asset.baseline_value)
            base = asset.baseline_value
        discount = picks.year_discount ** (asset.year - picks.season)
        return base * picks.round_multipliers[asset.round] * discount

    def score_components(self, asset: PlayerAsset | PickAsset, settings: LeagueSettings) -> ScoreComponents:
        if isinstance(asset, PickAsset):
            value = self.pick_value(asset)
            return ScoreComponents(asset.asset_id, "PICK", value, value, value, value)
        if isinstance(asset, PlayerAsset):
            _validate_player(asset)
            factor = self.adjuster.factor(asset.position, settings)
            now_scale = factor * self.now_curves.multiplier_for(asset.position, asset.age)
            future_scale = (
                factor
                * self.future_curves.multiplier_for(asset.position, asset.age)
                * risk_adjustment(asset.status)
            )
            return ScoreComponents(
                asset.asset_id,
                asset.position.upper(),
                now_scale * asset.market_value,
                now_scale * asset.proj_now,
                future_scale * asset.market_value,
                future_scale * asset.proj_future,
            )
        raise ValidationError("kind", f"unsupported asset type {type(asset).__name__}")

    def score(self, asset: PlayerAsset | PickAsset, settings: LeagueSettings) -> ScoredAsset:
        weights = self.config.weights
        if isinstance(asset, PickAsset):
            value = self.pick_value(asset)
            return ScoredAsset(
                asset=asset,
                now_score=value,
                future_score=value,
                composite=max(0.0, weights.alpha * value + (1.0 - weights.alpha) * value),
            )
        if isinstance(asset, PlayerAsset):
            _validate_player(asset)
            base_now = weights.wM_now * asset.market_value + weights.wP_now * asset.proj_now
            base_potential = weights.wM_future * asset.market_value + weights.wP_future * asset.proj_future
            age_multiplier = self.now_curves.multiplier_for(asset.position, asset.age)
            future_multiplier = self.future_curves.multiplier_for(asset.position, asset.age)
            risk = risk_adjustment(asset.status)
            now_score = self.adjuster.adjust(base_now, asset.position, settings) * age_multiplier
            future_score = (
                self.adjuster.adjust(base_potential, asset.position, settings) * future_multiplier * risk
            )
            composite = weights.alpha * now_score + (1.0 - weights.alpha) * future_score
            return ScoredAsset(
                asset=asset,
                now_score=now_score,
                future_score=future_score,
                composite=max(0.0, composite),
                age_multiplier=age_multiplier,
                future_age_multiplier=future_multiplier,
                risk_adjustment=risk,
            )
        raise ValidationError("kind", f"unsupported asset type {type(asset).__name__}")

    def score_many(self, assets: Iterable[PlayerAsset | PickAsset], settings: LeagueSettings) -> List[ScoredAsset]:
        return [self.score(asset, settings) for asset in assets]


def score(asset: PlayerAsset | PickAsset, settings: LeagueSettings, config: AppConfig) -> ScoredAsset:
    """Score a single asset; raises ValidationError for malformed input."""

    return ValuationEngine(config).score(asset, settings)


def score_many(
    assets: Iterable[PlayerAsset | PickAsset],
    settings: LeagueSettings,
    config: AppConfig,
) -> List[ScoredAsset]:
    return ValuationEngine(config).score_many(assets, settings)


def score_components(
    asset: PlayerAsset | PickAsset,
    settings: LeagueSettings,
    config: AppConfig,
) -> ScoreComponents:
    return ValuationEngine(config).score_components(asset, settings)
