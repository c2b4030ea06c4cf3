"""League scoring and roster settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


ScoringFormat = Literal["PPR", "Half", "Standard"]

SCORING_FORMATS: tuple[str, ...] = ("PPR", "Half", "Standard")


class StarterSlots(BaseModel):
    QB: int = Field(default=1, ge=0, le=3)
    RB: int = Field(default=2, ge=0, le=4)
    WR: int = Field(default=2, ge=0, le=5)
    TE: int = Field(default=1, ge=0, le=3)
    FLEX: int = Field(default=1, ge=0, le=3)
    SUPERFLEX: int = Field(default=0, ge=0, le=2)

    model_config = ConfigDict(frozen=True)

    def required(self, position: str) -> int:
        return int(getattr(self, position.upper(), 0))


class LeagueSettings(BaseModel):
    scoring_format: ScoringFormat = "PPR"
    superflex: bool = False
    te_premium: float = Field(default=0.0, ge=0.0)
    league_size: int = Field(default=12, gt=0)
    starters: StarterSlots = Field(default_factory=StarterSlots)

    model_config = ConfigDict(frozen=True)

    @property
    def superflex_slots(self) -> int:
        """Superflex starter slots, counting a flagged league with no slot as one."""

        if self.starters.SUPERFLEX:
            return self.starters.SUPERFLEX
        return 1 if self.superflex else 0

    def describe(self) -> str:
        parts = [self.scoring_format]
        if self.superflex:
            parts.append("SF")
        if self.te_premium > 0:
            parts.append(f"TEP {self.te_premium:g}")
        parts.append(f"{self.league_size}-team")
        starters = self.starters
        slots = [
            f"{count}{name}"
            for name, count in (
                ("QB", starters.QB),
                ("RB", starters.RB),
                ("WR", starters.WR),
                ("TE", starters.TE),
                ("FLEX", starters.FLEX),
                ("SF", starters.SUPERFLEX),
            )
            if count > 0
        ]
        if slots:
            parts.append("/".join(slots))
        return " | ".join(parts)
