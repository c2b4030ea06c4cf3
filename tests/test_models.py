import pytest
from pydantic import TypeAdapter, ValidationError

from dynasty.models import (
    AgeCurve,
    Asset,
    LeagueSettings,
    ModelWeights,
    PickAsset,
    PlayerAsset,
    ScoredAsset,
    StarterSlots,
    TeamProfile,
)


def test_age_curve_requires_one_more_multiplier_than_breakpoints():
    with pytest.raises(ValidationError):
        AgeCurve(breakpoints=(23, 26), multipliers=(1.0, 0.9))


def test_age_curve_rejects_unsorted_breakpoints():
    with pytest.raises(ValidationError):
        AgeCurve(breakpoints=(26, 23), multipliers=(1.0, 0.9, 0.8))


def test_age_curve_rejects_rising_multipliers():
    with pytest.raises(ValidationError):
        AgeCurve(breakpoints=(23, 26), multipliers=(1.0, 0.8, 0.9))


def test_age_curve_first_multiplier_must_be_one():
    with pytest.raises(ValidationError):
        AgeCurve(breakpoints=(23,), multipliers=(0.9, 0.8))


def test_model_weights_pairs_must_sum_to_one():
    with pytest.raises(ValidationError):
        ModelWeights(alpha=0.5, wM_now=0.7, wP_now=0.4, wM_future=0.5, wP_future=0.5)


def test_model_weights_from_free_parameters():
    weights = ModelWeights.from_free_parameters(0.3, 0.25, 0.8)
    assert weights.wP_now == pytest.approx(0.75)
    assert weights.wP_future == pytest.approx(0.2)


def test_asset_union_discriminates_on_kind():
    adapter = TypeAdapter(Asset)
    pick = adapter.validate_python({"kind": "pick", "asset_id": "2027-1", "year": 2027, "round": 1})
    player = adapter.validate_python(
        {"kind": "player", "asset_id": "p1", "name": "Joe Runner", "position": "RB", "age": 24}
    )
    assert isinstance(pick, PickAsset)
    assert isinstance(player, PlayerAsset)


def test_scored_asset_helpers():
    scored = ScoredAsset(
        asset=PlayerAsset(asset_id="p1", name="Joe Runner", position="rb", age=24),
        now_score=10.0,
        future_score=20.0,
        composite=16.0,
    )
    assert scored.position == "RB"
    assert scored.label == "Joe Runner (RB)"
    assert scored.metric("future") == 20.0
    with pytest.raises(KeyError):
        scored.metric("ceiling")


def test_scored_asset_rejects_negative_scores():
    with pytest.raises(ValidationError):
        ScoredAsset(
            asset=PickAsset(asset_id="2027-1", year=2027, round=1),
            now_score=-1.0,
            future_score=0.0,
            composite=0.0,
        )


def test_team_profile_owns_players_and_picks():
    profile = TeamProfile(roster=frozenset({"p1"}), owned_picks=frozenset({"2027-1"}))
    assert profile.owns("p1")
    assert profile.owns("2027-1")
    assert not profile.owns("p2")


def test_superflex_flag_without_slot_counts_one_slot():
    assert LeagueSettings(superflex=True).superflex_slots == 1
    assert LeagueSettings(superflex=True, starters=StarterSlots(SUPERFLEX=2)).superflex_slots == 2
    assert LeagueSettings().superflex_slots == 0
