"""Versioned scoring configuration consumed by the valuation engine."""

from __future__ import annotations

import math
from typing import Dict, Literal, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict


_PAIR_TOLERANCE = 1e-6


class AgeCurve(BaseModel):
    """Ordered ``(breakpoint, multiplier)`` steps for one position.

    ``multipliers[i]`` applies to ages strictly below ``breakpoints[i]``; the
    trailing multiplier applies once an age reaches the last breakpoint.
    """

    breakpoints: Tuple[float, ...]
    multipliers: Tuple[float, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_shape(self) -> "AgeCurve":
        if len(self.multipliers) != len(self.breakpoints) + 1:
            raise ValueError("multipliers must have exactly one more entry than breakpoints")
        for earlier, later in zip(self.breakpoints, self.breakpoints[1:]):
            if later <= earlier:
                raise ValueError("breakpoints must be strictly increasing")
        for value in self.multipliers:
            if not (0.0 < value <= 1.0) or math.isnan(value):
                raise ValueError("multipliers must lie in (0, 1]")
        for earlier, later in zip(self.multipliers, self.multipliers[1:]):
            if later > earlier:
                raise ValueError("multipliers must be non-increasing with age")
        if self.multipliers[0] != 1.0:
            raise ValueError("multiplier below the first breakpoint must be 1.0")
        return self

    def multiplier_for(self, age: float) -> float:
        for breakpoint, multiplier in zip(self.breakpoints, self.multipliers):
            if age < breakpoint:
                return multiplier
        return self.multipliers[-1]


class ModelWeights(BaseModel):
    alpha: float = Field(default=0.4, ge=0.0, le=1.0)
    wM_now: float = Field(default=0.6, ge=0.0, le=1.0)
    wP_now: float = Field(default=0.4, ge=0.0, le=1.0)
    wM_future: float = Field(default=0.4, ge=0.0, le=1.0)
    wP_future: float = Field(default=0.6, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_pairs(self) -> "ModelWeights":
        if abs(self.wM_now + self.wP_now - 1.0) > _PAIR_TOLERANCE:
            raise ValueError("wM_now + wP_now must equal 1")
        if abs(self.wM_future + self.wP_future - 1.0) > _PAIR_TOLERANCE:
            raise ValueError("wM_future + wP_future must equal 1")
        return self

    @classmethod
    def from_free_parameters(cls, alpha: float, wm_now: float, wm_future: float) -> "ModelWeights":
        """Build weights from the three independent parameters of the simplex."""

        return cls(
            alpha=alpha,
            wM_now=wm_now,
            wP_now=1.0 - wm_now,
            wM_future=wm_future,
            wP_future=1.0 - wm_future,
        )


class PickValuation(BaseModel):
    season: int = 2026
    base_value: float = Field(default=1000.0, gt=0.0)
    year_discount: float = Field(default=0.9, gt=0.0, le=1.0)
    horizon_years: int = Field(default=3, ge=0)
    round_multipliers: Dict[int, float] = Field(
        default_factory=lambda: {1: 1.0, 2: 0.4, 3: 0.15, 4: 0.05}
    )

    model_config = ConfigDict(frozen=True)


class AppConfig(BaseModel):
    """Scoring configuration; exactly one is active at a time upstream."""

    version: int = Field(default=1, ge=1)
    status: Literal["active", "candidate"] = "active"
    rollout_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    weights: ModelWeights = Field(default_factory=ModelWeights)
    age_curves: Dict[str, AgeCurve] = Field(default_factory=dict)
    future_age_curves: Dict[str, AgeCurve] = Field(default_factory=dict)
    scoring_multipliers: Dict[str, float] = Field(default_factory=dict)
    picks: PickValuation = Field(default_factory=PickValuation)

    model_config = ConfigDict(frozen=True)

    @field_validator("age_curves", "future_age_curves")
    @classmethod
    def _upper_positions(cls, value: Dict[str, AgeCurve]) -> Dict[str, AgeCurve]:
        return {key.upper(): curve for key, curve in value.items()}

    @field_validator("scoring_multipliers")
    @classmethod
    def _positive_multipliers(cls, value: Dict[str, float]) -> Dict[str, float]:
        for key, multiplier in value.items():
            if not multiplier > 0:
                raise ValueError(f"scoring multiplier for {key!r} must be positive")
        return value
