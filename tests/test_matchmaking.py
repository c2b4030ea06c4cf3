import pytest

from dynasty.analysis import RosterFlags, TeamBenchmark
from dynasty.errors import NotFoundError, ValidationError
from dynasty.matchmaking import (
    InMemoryLeagueRepository,
    MatchmakingService,
    SearchBudget,
    compatibility,
    compute_matchmaking,
)
from dynasty.models import LeagueSnapshot, LeagueTeam, PlayerAsset


def _player(asset_id: str, position: str) -> PlayerAsset:
    return PlayerAsset(
        asset_id=asset_id,
        name=asset_id.upper(),
        position=position,
        age=22,
        market_value=5000,
        proj_now=5000,
        proj_future=5000,
    )


def _league() -> LeagueSnapshot:
    rosters = {
        "a": ["QB", "QB", "QB", "RB", "RB", "WR", "WR", "TE"],
        "b": ["QB", "RB", "RB", "RB", "RB", "RB", "RB", "WR", "WR", "TE"],
        "c": ["QB", "QB", "QB", "WR", "WR"],
    }
    assets = {}
    teams = []
    for team_id, positions in rosters.items():
        ids = []
        for index, position in enumerate(positions):
            asset_id = f"{team_id}_{position.lower()}{index}"
            assets[asset_id] = _player(asset_id, position)
            ids.append(asset_id)
        teams.append(LeagueTeam(team_id=team_id, display_name=f"Team {team_id.upper()}", asset_ids=ids))
    return LeagueSnapshot(league_id="L1", teams=teams, assets=assets)


def _benchmark(team_id, now, future, surplus=(), needs=(), critical=()):
    return TeamBenchmark(
        team_id=team_id,
        now_index=now,
        future_index=future,
        depth={},
        flags=RosterFlags(critical_gaps=tuple(critical)),
        surplus=tuple(surplus),
        needs=tuple(needs),
    )


def test_compatibility_rewards_complementary_rosters():
    mine = _benchmark("a", 60, 40, surplus=("RB",), needs=("WR",))
    theirs = _benchmark("b", 30, 50, surplus=("WR",), needs=("RB",))
    score, details = compatibility(mine, theirs, "win-now")
    assert score == 70
    assert details["give_positions"] == ("RB",)
    assert details["get_positions"] == ("WR",)
    assert details["timeline_note"] == "They're rebuilding, you're contending - perfect match"


def test_compatibility_penalises_critical_gaps_and_clamps():
    mine = _benchmark("a", 50, 50, surplus=("RB",), needs=("WR",))
    theirs = _benchmark("b", 50, 50, surplus=("WR",), needs=("RB",), critical=("TE",))
    score, details = compatibility(mine, theirs, "balanced")
    assert score == 25 + 25 + 15 - 10
    assert details["timeline_note"] == "Balanced approach works with any timeline"
    empty, _ = compatibility(_benchmark("a", 0, 0), _benchmark("b", 60, 40, critical=("QB", "RB")), "win-now")
    assert empty == 0


def test_compute_matchmaking_ranks_opponents():
    repository = InMemoryLeagueRepository([_league()])
    ranked = compute_matchmaking(repository, "a", "L1", "balanced")
    assert [item.opponent_id for item in ranked] == ["b", "c"]
    assert ranked[0].compatibility_score == 85
    assert ranked[0].give_positions == ("QB",)
    assert ranked[0].surplus_complement == {"QB": 25}
    assert ranked[0].needs_complement == {"RB": 25, "WR": 10, "TE": 10}
    assert ranked[1].compatibility_score == 45
    assert ranked[0].display_name == "Team B"


def test_matchmaking_missing_league_or_team():
    service = MatchmakingService(InMemoryLeagueRepository([_league()]))
    with pytest.raises(NotFoundError):
        service.compute_matchmaking("a", "nope")
    with pytest.raises(NotFoundError):
        service.compute_matchmaking("zz", "L1")
    with pytest.raises(ValidationError):
        service.compute_matchmaking("a", "L1", "yolo")


def test_missing_asset_is_reported():
    league = _league()
    broken = league.model_copy(
        update={"teams": [league.teams[0].model_copy(update={"asset_ids": ["ghost"]})] + league.teams[1:]}
    )
    service = MatchmakingService(InMemoryLeagueRepository([broken]))
    with pytest.raises(NotFoundError):
        service.compute_matchmaking("a", "L1")


def test_league_proposals_stay_on_each_roster():
    league = _league()
    service = MatchmakingService(InMemoryLeagueRepository([league]))
    proposals = service.generate_proposals("a", "b", "L1", "balanced", budget=SearchBudget.unbounded())
    assert len(proposals) == 3
    mine = set(league.team("a").asset_ids)
    theirs = set(league.team("b").asset_ids)
    for proposal in proposals:
        assert proposal.give <= mine
        assert proposal.get <= theirs
        assert proposal.fairness_delta <= 0.10
    assert proposals[0].give == frozenset({"a_qb0"})
    assert proposals[0].get == frozenset({"b_qb0"})


def test_cannot_propose_to_yourself():
    service = MatchmakingService(InMemoryLeagueRepository([_league()]))
    with pytest.raises(ValidationError):
        service.generate_proposals("a", "a", "L1")


def test_profile_defaults_split_players_and_picks():
    league = _league()
    service = MatchmakingService(InMemoryLeagueRepository([league]))
    profile = service.profile_for(league, league.team("c"))
    assert profile.team_id == "c"
    assert profile.roster == frozenset(league.team("c").asset_ids)
    assert profile.owned_picks == frozenset()
