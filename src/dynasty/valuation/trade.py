"""Two-sided trade evaluation: totals, verdict and balancing hints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from dynasty.errors import ValidationError
from dynasty.models import AppConfig, LeagueSettings, PickAsset, PlayerAsset, ScoredAsset

from .engine import ValuationEngine


Verdict = Literal["FAIR", "FAVORS_A", "FAVORS_B"]

FAIR_PERCENT = 5.0
SUGGESTION_PERCENT = 10.0
LATE_PICK_GAP = 200.0
MID_PICK_GAP = 500.0


@dataclass(frozen=True)
class SideTotals:
    now_score: float
    future_score: float
    composite: float

    @classmethod
    def from_scored(cls, scored: Sequence[ScoredAsset]) -> "SideTotals":
        return cls(
            now_score=sum(item.now_score for item in scored),
            future_score=sum(item.future_score for item in scored),
            composite=sum(item.composite for item in scored),
        )


@dataclass(frozen=True)
class TradeEvaluation:
    team_a: SideTotals
    team_b: SideTotals
    team_a_assets: list[ScoredAsset]
    team_b_assets: list[ScoredAsset]
    percent_difference: float
    verdict: Verdict
    explanation: str
    suggestion: Optional[str] = None

    @property
    def now_delta(self) -> float:
        return self.team_a.now_score - self.team_b.now_score

    @property
    def future_delta(self) -> float:
        return self.team_a.future_score - self.team_b.future_score


def percent_difference(total_a: float, total_b: float) -> float:
    larger = max(total_a, total_b)
    if larger <= 0:
        return 0.0
    return abs(total_a - total_b) / larger * 100.0


def _verdict(team_a: SideTotals, team_b: SideTotals, percent: float) -> Verdict:
    if percent <= FAIR_PERCENT:
        return "FAIR"
    return "FAVORS_A" if team_a.composite > team_b.composite else "FAVORS_B"


def _explanation(team_a: SideTotals, team_b: SideTotals, verdict: Verdict, percent: float) -> str:
    rounded = round(percent)
    if verdict == "FAIR":
        text = f"This trade is well-balanced with only a {rounded}% difference in total value. "
    else:
        favored = "Team A" if verdict == "FAVORS_A" else "Team B"
        text = f"This trade favors {favored} by {rounded}%. "

    now_gap = abs(team_a.now_score - team_b.now_score)
    future_gap = abs(team_a.future_score - team_b.future_score)
    if now_gap > future_gap * 2:
        text += "The trade heavily favors one team's win-now potential."
    elif future_gap > now_gap * 2:
        text += "The trade heavily favors one team's future outlook."
    else:
        text += "The trade balances both win-now and future considerations."
    return text


def _suggestion(team_a: SideTotals, team_b: SideTotals, verdict: Verdict, percent: float) -> Optional[str]:
    if verdict == "FAIR" or percent > SUGGESTION_PERCENT:
        return None
    behind = "Team B" if verdict == "FAVORS_A" else "Team A"
    gap = abs(team_a.composite - team_b.composite)
    if gap < LATE_PICK_GAP:
        return f"Add a late-round pick to {behind} to balance this trade."
    if gap < MID_PICK_GAP:
        return f"Add a mid-round pick to {behind} to balance this trade."
    return f"Add a high-round pick or quality player to {behind} to balance this trade."


def evaluate_scored_trade(team_a_assets: Sequence[ScoredAsset], team_b_assets: Sequence[ScoredAsset]) -> TradeEvaluation:
    """Evaluate a trade whose assets are already scored.

    Each side lists the package attributed to that team; ``FAVORS_A`` means
    team A's package carries more composite value.
    """

    if not team_a_assets and not team_b_assets:
        raise ValidationError("team_a", "at least one side must include an asset")

    team_a = SideTotals.from_scored(team_a_assets)
    team_b = SideTotals.from_scored(team_b_assets)
    percent = percent_difference(team_a.composite, team_b.composite)
    verdict = _verdict(team_a, team_b, percent)
    return TradeEvaluation(
        team_a=team_a,
        team_b=team_b,
        team_a_assets=list(team_a_assets),
        team_b_assets=list(team_b_assets),
        percent_difference=percent,
        verdict=verdict,
        explanation=_explanation(team_a, team_b, verdict, percent),
        suggestion=_suggestion(team_a, team_b, verdict, percent),
    )


def evaluate_trade(
    team_a: Sequence[PlayerAsset | PickAsset],
    team_b: Sequence[PlayerAsset | PickAsset],
    settings: LeagueSettings,
    config: AppConfig,
) -> TradeEvaluation:
    engine = ValuationEngine(config)
    return evaluate_scored_trade(engine.score_many(team_a, settings), engine.score_many(team_b, settings))
