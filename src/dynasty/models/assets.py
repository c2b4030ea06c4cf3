"""Tradeable asset records and their scored counterparts."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PlayerAsset(BaseModel):
    """Rostered athlete with the raw production inputs used for valuation."""

    kind: Literal["player"] = "player"
    asset_id: str = Field(..., min_length=1)
    name: str
    position: str
    age: float
    team: str = ""
    market_value: float = 0.0
    proj_now: float = 0.0
    proj_future: float = 0.0
    status: str = "ACTIVE"

    model_config = ConfigDict(frozen=True)


class PickAsset(BaseModel):
    """Future draft selection."""

    kind: Literal["pick"] = "pick"
    asset_id: str = Field(..., min_length=1)
    year: int
    round: int
    baseline_value: float | None = None

    model_config = ConfigDict(frozen=True)


Asset = Annotated[Union[PlayerAsset, PickAsset], Field(discriminator="kind")]

PICK_POSITION = "PICK"


def asset_position(asset: PlayerAsset | PickAsset) -> str:
    if isinstance(asset, PlayerAsset):
        return asset.position.upper()
    return PICK_POSITION


class ScoredAsset(BaseModel):
    """Asset plus the scores computed under one settings/config pair."""

    asset: Asset
    now_score: float = Field(..., ge=0.0)
    future_score: float = Field(..., ge=0.0)
    composite: float = Field(..., ge=0.0)
    age_multiplier: float = 1.0
    future_age_multiplier: float = 1.0
    risk_adjustment: float = 1.0

    model_config = ConfigDict(frozen=True)

    @property
    def asset_id(self) -> str:
        return self.asset.asset_id

    @property
    def position(self) -> str:
        return asset_position(self.asset)

    @property
    def is_pick(self) -> bool:
        return isinstance(self.asset, PickAsset)

    @property
    def age(self) -> float | None:
        if isinstance(self.asset, PlayerAsset):
            return self.asset.age
        return None

    @property
    def label(self) -> str:
        asset = self.asset
        if isinstance(asset, PlayerAsset):
            return f"{asset.name} ({asset.position.upper()})"
        return f"{asset.year} round {asset.round} pick"

    def metric(self, name: str) -> float:
        """Return ``now``, ``future`` or ``composite`` score by name."""

        if name == "now":
            return self.now_score
        if name == "future":
            return self.future_score
        if name == "composite":
            return self.composite
        raise KeyError(f"Unknown score metric {name!r}")


class HistoricalOutcome(BaseModel):
    """Realized value observed for an asset after the fact."""

    asset: Asset
    realized_value: float

    model_config = ConfigDict(frozen=True)
