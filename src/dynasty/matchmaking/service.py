"""League-level matchmaking over snapshots resolved by a repository."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from dynasty.analysis import CORE_POSITIONS, TeamBenchmark, team_benchmark
from dynasty.config import default_app_config
from dynasty.errors import NotFoundError, ValidationError
from dynasty.models import AppConfig, LeagueSnapshot, LeagueTeam, PickAsset, ScoredAsset, TeamProfile
from dynasty.valuation import ValuationEngine

from .proposals import OBJECTIVE_METRICS, OBJECTIVES, Proposal, SearchBudget, search_proposals


logger = logging.getLogger(__name__)

FULL_COMPLEMENT = 25
PARTIAL_COMPLEMENT = 10
CRITICAL_GAP_PENALTY = 10
MAX_COMPATIBILITY = 100
MIN_COMPATIBILITY = 20
TOP_OPPONENTS = 5
TOP_PROPOSALS = 3


class LeagueRepository(Protocol):
    def get_league(self, league_id: str) -> LeagueSnapshot:
        """Return the snapshot or raise NotFoundError."""


class InMemoryLeagueRepository:
    def __init__(self, leagues: Iterable[LeagueSnapshot] = ()):
        self._lock = threading.Lock()
        self._leagues: Dict[str, LeagueSnapshot] = {}
        for league in leagues:
            self.save(league)

    def save(self, league: LeagueSnapshot) -> LeagueSnapshot:
        with self._lock:
            self._leagues[league.league_id] = league
        return league

    def get_league(self, league_id: str) -> LeagueSnapshot:
        with self._lock:
            league = self._leagues.get(league_id)
        if league is None:
            raise NotFoundError(f"League {league_id} not found")
        return league

    def list_leagues(self) -> List[str]:
        with self._lock:
            return sorted(self._leagues)


@dataclass(frozen=True)
class RankedOpponent:
    opponent_id: str
    display_name: str
    user_handle: Optional[str]
    compatibility_score: int
    give_positions: Tuple[str, ...]
    get_positions: Tuple[str, ...]
    timeline_note: str
    surplus_complement: Dict[str, int] = field(default_factory=dict)
    needs_complement: Dict[str, int] = field(default_factory=dict)


def _timeline_component(objective: str, theirs: TeamBenchmark) -> Tuple[int, str]:
    if objective == "win-now":
        if theirs.future_index > theirs.now_index:
            return 20, "They're rebuilding, you're contending - perfect match"
        if theirs.now_index > theirs.future_index:
            return 5, "Both contending - may need to overpay"
        return 10, "Neutral timeline fit"
    if objective == "future-lean":
        if theirs.now_index > theirs.future_index:
            return 20, "You're rebuilding, they're contending - perfect match"
        if theirs.future_index > theirs.now_index:
            return 5, "Both rebuilding - may need to overpay"
        return 10, "Neutral timeline fit"
    return 15, "Balanced approach works with any timeline"


def compatibility(mine: TeamBenchmark, theirs: TeamBenchmark, objective: str) -> Tuple[int, dict]:
    """Score 0-100 from positional complement plus timeline fit."""

    score = 0
    surplus_complement: Dict[str, int] = {}
    needs_complement: Dict[str, int] = {}
    give: List[str] = []
    get: List[str] = []

    for position in CORE_POSITIONS:
        my_surplus = position in mine.surplus
        my_need = position in mine.needs
        their_surplus = position in theirs.surplus
        their_need = position in theirs.needs

        if my_surplus and their_need:
            surplus_complement[position] = FULL_COMPLEMENT
            give.append(position)
            score += FULL_COMPLEMENT
        if their_surplus and my_need:
            needs_complement[position] = FULL_COMPLEMENT
            get.append(position)
            score += FULL_COMPLEMENT
        if (my_surplus and their_surplus) or (my_need and their_need):
            if my_surplus:
                surplus_complement[position] = PARTIAL_COMPLEMENT
                give.append(position)
            if my_need:
                needs_complement[position] = PARTIAL_COMPLEMENT
                get.append(position)
            score += PARTIAL_COMPLEMENT

    timeline_score, note = _timeline_component(objective, theirs)
    score += timeline_score
    if theirs.flags.critical_gaps:
        score -= CRITICAL_GAP_PENALTY
    score = max(0, min(score, MAX_COMPATIBILITY))

    return score, {
        "give_positions": tuple(give),
        "get_positions": tuple(get),
        "timeline_note": note,
        "surplus_complement": surplus_complement,
        "needs_complement": needs_complement,
    }


class MatchmakingService:
    """Rank trade partners and search proposals inside one league."""

    def __init__(self, repository: LeagueRepository, config: Optional[AppConfig] = None):
        self.repository = repository
        self.config = config or default_app_config()

    def _check_objective(self, objective: str) -> None:
        if objective not in OBJECTIVE_METRICS:
            raise ValidationError("objective", f"expected one of {', '.join(OBJECTIVES)}, got {objective!r}")

    def _team(self, league: LeagueSnapshot, team_id: str) -> LeagueTeam:
        team = league.team(team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not found in league {league.league_id}")
        return team

    def score_team(self, league: LeagueSnapshot, team: LeagueTeam, engine: Optional[ValuationEngine] = None) -> List[ScoredAsset]:
        engine = engine or ValuationEngine(self.config)
        scored: List[ScoredAsset] = []
        for asset_id in team.asset_ids:
            asset = league.assets.get(asset_id)
            if asset is None:
                raise NotFoundError(f"Asset {asset_id} on team {team.team_id} not found in league {league.league_id}")
            scored.append(engine.score(asset, league.settings))
        return scored

    def profile_for(self, league: LeagueSnapshot, team: LeagueTeam) -> TeamProfile:
        if team.profile is not None:
            return team.profile
        players = frozenset(
            asset_id for asset_id in team.asset_ids if not isinstance(league.assets.get(asset_id), PickAsset)
        )
        picks = frozenset(asset_id for asset_id in team.asset_ids if asset_id not in players)
        return TeamProfile(team_id=team.team_id, roster=players, owned_picks=picks, league_settings=league.settings)

    def compute_matchmaking(self, team_id: str, league_id: str, objective: str = "balanced") -> List[RankedOpponent]:
        self._check_objective(objective)
        start = time.perf_counter()
        league = self.repository.get_league(league_id)
        me = self._team(league, team_id)
        engine = ValuationEngine(self.config)

        benchmarks: Dict[str, TeamBenchmark] = {}
        for team in league.teams:
            benchmarks[team.team_id] = team_benchmark(
                self.profile_for(league, team), self.score_team(league, team, engine)
            )

        mine = benchmarks[me.team_id]
        results: List[RankedOpponent] = []
        for opponent in league.teams:
            if opponent.team_id == me.team_id:
                continue
            score, details = compatibility(mine, benchmarks[opponent.team_id], objective)
            if score <= MIN_COMPATIBILITY:
                continue
            results.append(
                RankedOpponent(
                    opponent_id=opponent.team_id,
                    display_name=opponent.display_name,
                    user_handle=opponent.user_handle,
                    compatibility_score=score,
                    **details,
                )
            )

        results.sort(key=lambda item: (-item.compatibility_score, item.opponent_id))
        logger.info(
            "Matchmaking for %s in %s (%s): %d of %d opponents above threshold in %.3fs",
            team_id,
            league_id,
            objective,
            len(results),
            len(league.teams) - 1,
            time.perf_counter() - start,
        )
        return results[:TOP_OPPONENTS]

    def generate_proposals(
        self,
        team_id: str,
        opponent_id: str,
        league_id: str,
        objective: str = "balanced",
        *,
        fairness_band: Optional[float] = None,
        budget: Optional[SearchBudget] = None,
        limit: int = TOP_PROPOSALS,
    ) -> List[Proposal]:
        self._check_objective(objective)
        if team_id == opponent_id:
            raise ValidationError("opponent_id", "cannot propose a trade with yourself")
        league = self.repository.get_league(league_id)
        me = self._team(league, team_id)
        opponent = self._team(league, opponent_id)
        engine = ValuationEngine(self.config)

        search = search_proposals(
            self.score_team(league, me, engine),
            self.score_team(league, opponent, engine),
            objective,
            fairness_band=fairness_band,
            budget=budget,
            my_profile=me.profile,
            their_profile=opponent.profile,
        )
        return search.proposals[:limit]


def compute_matchmaking(
    repository: LeagueRepository,
    team_id: str,
    league_id: str,
    objective: str = "balanced",
    config: Optional[AppConfig] = None,
) -> List[RankedOpponent]:
    return MatchmakingService(repository, config).compute_matchmaking(team_id, league_id, objective)
