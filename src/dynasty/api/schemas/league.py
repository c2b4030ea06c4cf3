from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class LeagueCreatedResponse(BaseModel):
    league_id: str
    teams: int
    assets: int


class RankedOpponentResponse(BaseModel):
    opponent_id: str
    display_name: str
    user_handle: Optional[str] = None
    compatibility_score: int
    give_positions: List[str]
    get_positions: List[str]
    timeline_note: str
    surplus_complement: Dict[str, int]
    needs_complement: Dict[str, int]


class ProposalResponse(BaseModel):
    give: List[str]
    get: List[str]
    fairness_delta: float
    rationale: str
    objective: str
    give_total: float
    get_total: float
    mutual_benefit: float
