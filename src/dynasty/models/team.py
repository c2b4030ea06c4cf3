"""Team strategy profile and league snapshots."""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from .assets import Asset
from .settings import LeagueSettings


Timeline = Literal["contend", "retool", "rebuild"]
RiskTolerance = Literal["low", "medium", "high"]


class TeamProfile(BaseModel):
    team_id: str | None = None
    timeline: Timeline = "retool"
    risk_tolerance: RiskTolerance = "medium"
    roster: FrozenSet[str] = Field(default_factory=frozenset)
    owned_picks: FrozenSet[str] = Field(default_factory=frozenset)
    league_settings: LeagueSettings = Field(default_factory=LeagueSettings)

    model_config = ConfigDict(frozen=True)

    def owns(self, asset_id: str) -> bool:
        return asset_id in self.roster or asset_id in self.owned_picks


class LeagueTeam(BaseModel):
    team_id: str = Field(..., min_length=1)
    display_name: str = ""
    user_handle: str | None = None
    asset_ids: List[str] = Field(default_factory=list)
    profile: TeamProfile | None = None

    model_config = ConfigDict(frozen=True)


class LeagueSnapshot(BaseModel):
    """League state resolved by the surrounding service layer."""

    league_id: str = Field(..., min_length=1)
    settings: LeagueSettings = Field(default_factory=LeagueSettings)
    teams: List[LeagueTeam] = Field(default_factory=list)
    assets: Dict[str, Asset] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def team(self, team_id: str) -> LeagueTeam | None:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None
