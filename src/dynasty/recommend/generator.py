"""Ranked give/get suggestions for a requesting team."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from dynasty.analysis import analyze_trade_impact, roster_flags
from dynasty.models import LeagueSettings, ScoredAsset, TeamProfile


Action = Literal["get", "give", "add"]
Priority = Literal["critical", "high", "medium", "low"]

MARGINAL_WEIGHT = 0.5
TIMELINE_WEIGHT = 0.35
RISK_WEIGHT = 0.25
CRITICAL_GAP_BONUS = 0.5

YOUNG_AGE = 24.0
VETERAN_AGE = 28.0

OVERPAY_MIN = 0.15
OVERPAY_MAX = 0.25
OVERPAY_SHARE = 0.3


@dataclass(frozen=True)
class Recommendation:
    action: Action
    asset: ScoredAsset
    fit_score: float
    priority: Priority
    reasoning: str

    @property
    def asset_id(self) -> str:
        return self.asset.asset_id

    @property
    def composite(self) -> float:
        return self.asset.composite


def _by_position(assets: Sequence[ScoredAsset]) -> Dict[str, List[ScoredAsset]]:
    grouped: Dict[str, List[ScoredAsset]] = defaultdict(list)
    for asset in assets:
        grouped[asset.position].append(asset)
    for bucket in grouped.values():
        bucket.sort(key=lambda item: (-item.composite, item.asset_id))
    return grouped


def _volatility(asset: ScoredAsset) -> float:
    """+1 for young, future-leaning or pick assets; -1 for proven veterans."""

    if asset.is_pick:
        return 1.0
    total = asset.now_score + asset.future_score
    lean = (asset.future_score - asset.now_score) / total if total > 0 else 0.0
    age = asset.age
    if age is not None and age <= YOUNG_AGE:
        lean += 0.5
    elif age is not None and age >= VETERAN_AGE:
        lean -= 0.5
    return max(-1.0, min(1.0, lean))


def _risk_term(profile: TeamProfile, asset: ScoredAsset) -> float:
    if profile.risk_tolerance == "high":
        return RISK_WEIGHT * _volatility(asset)
    if profile.risk_tolerance == "low":
        if asset.now_score <= 0:
            return -RISK_WEIGHT
        return -RISK_WEIGHT * _volatility(asset)
    return 0.0


def _priority(fit: float) -> Priority:
    if fit >= 0.3:
        return "high"
    if fit >= 0.0:
        return "medium"
    return "low"


def balance_offer(
    team_a_assets: Sequence[ScoredAsset],
    team_b_assets: Sequence[ScoredAsset],
    give_ids: Sequence[str],
    get_ids: Sequence[str],
) -> Optional[Recommendation]:
    """Suggest a sweetener when a pending offer favours team A by 15-25%.

    The suggested asset is one team A keeps after the offer, picks first,
    valued closest to 30% of the gap. Offers outside the band, or that
    favour team B, yield ``None``.
    """

    give_set, get_set = set(give_ids), set(get_ids)
    give_total = sum(asset.composite for asset in team_a_assets if asset.asset_id in give_set)
    get_total = sum(asset.composite for asset in team_b_assets if asset.asset_id in get_set)
    larger = max(give_total, get_total)
    if larger <= 0 or get_total <= give_total:
        return None
    delta = (get_total - give_total) / larger
    if not OVERPAY_MIN < delta < OVERPAY_MAX:
        return None
    target = OVERPAY_SHARE * (get_total - give_total)
    spare = [asset for asset in team_a_assets if asset.asset_id not in give_set and asset.composite > 0]
    if not spare:
        return None
    sweetener = min(spare, key=lambda item: (not item.is_pick, abs(item.composite - target), item.asset_id))
    return Recommendation(
        action="add",
        asset=sweetener,
        fit_score=0.0,
        priority="low",
        reasoning=(
            f"This offer is {delta * 100:.0f}% in your favor; "
            f"adding {sweetener.label} makes it more balanced"
        ),
    )


def generate(
    team_a_assets: Sequence[ScoredAsset],
    team_b_assets: Sequence[ScoredAsset],
    settings: LeagueSettings,
    team_profile: Optional[TeamProfile] = None,
    *,
    limit: Optional[int] = None,
    offer: Optional[Tuple[Sequence[str], Sequence[str]]] = None,
) -> List[Recommendation]:
    """Rank every counterpart asset as a target and every own asset as a chip.

    Without a profile the fit is the composite differential against team A's
    depth chart, normalised by the largest composite in play. A profile adds
    the timeline fit of the single-asset move and a risk-tolerance term, and
    promotes targets that fill a critical roster gap. A pending ``offer`` of
    (give ids, get ids) may add a balancing ``add`` suggestion.
    """

    everything = list(team_a_assets) + list(team_b_assets)
    scale = max((asset.composite for asset in everything), default=0.0) or 1.0
    depth = _by_position(team_a_assets)

    gap_positions: frozenset[str] = frozenset()
    if team_profile is not None:
        gap_profile = team_profile.model_copy(update={"league_settings": settings})
        gap_positions = frozenset(
            flag.split(":", 1)[1]
            for flag in roster_flags(gap_profile, list(team_a_assets))
            if flag.startswith("critical_gap:")
        )

    recommendations: List[Recommendation] = []

    for asset in team_b_assets:
        incumbents = depth.get(asset.position, [])
        best = incumbents[0].composite if incumbents else 0.0
        marginal = max(-1.0, min(1.0, (asset.composite - best) / scale))
        fit = marginal
        reasons = [f"{marginal * 100:+.0f}% composite over your best {asset.position}"]
        fills_gap = False
        if team_profile is not None:
            impact = analyze_trade_impact(team_profile, [], [asset])
            fit = MARGINAL_WEIGHT * marginal + TIMELINE_WEIGHT * impact.fit_score + _risk_term(team_profile, asset)
            reasons.append(f"{impact.timeline_fit} fit for a {team_profile.timeline} timeline")
            if asset.position in gap_positions:
                fills_gap = True
                fit += CRITICAL_GAP_BONUS
                reasons.append(f"fills an empty {asset.position} slot")
        recommendations.append(
            Recommendation(
                action="get",
                asset=asset,
                fit_score=fit,
                priority="critical" if fills_gap else _priority(fit),
                reasoning="; ".join(reasons),
            )
        )

    for asset in team_a_assets:
        behind = [item for item in depth.get(asset.position, []) if item.asset_id != asset.asset_id]
        next_best = behind[0].composite if behind else 0.0
        drop_off = max(0.0, asset.composite - next_best)
        marginal = -min(1.0, drop_off / scale)
        fit = marginal
        reasons = [f"{drop_off:.0f} composite drop-off to your next {asset.position}"]
        if team_profile is not None:
            impact = analyze_trade_impact(team_profile, [asset], [])
            fit = MARGINAL_WEIGHT * marginal + TIMELINE_WEIGHT * impact.fit_score - _risk_term(team_profile, asset)
            reasons.append(f"{impact.timeline_fit} fit for a {team_profile.timeline} timeline")
        recommendations.append(
            Recommendation(
                action="give",
                asset=asset,
                fit_score=fit,
                priority=_priority(fit),
                reasoning="; ".join(reasons),
            )
        )

    if offer is not None:
        sweetener = balance_offer(team_a_assets, team_b_assets, *offer)
        if sweetener is not None:
            recommendations.append(sweetener)

    recommendations.sort(key=lambda rec: (-rec.fit_score, -rec.composite, rec.asset_id, rec.action))
    if limit is not None:
        return recommendations[:limit]
    return recommendations


generate_recommendations = generate
