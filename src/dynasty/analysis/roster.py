"""Roster construction, depth and trade-impact analysis."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from dynasty.models import LeagueSettings, PlayerAsset, ScoredAsset, TeamProfile, Timeline


FitLabel = Literal["strong", "good", "neutral", "weak", "poor"]

CORE_POSITIONS: Tuple[str, ...] = ("QB", "RB", "WR", "TE")
FLEX_POSITIONS = frozenset({"RB", "WR", "TE"})
SLOT_ORDER: Tuple[str, ...] = ("QB", "RB", "WR", "TE", "FLEX", "SUPERFLEX")

REPLACEMENT_BASELINES: Dict[str, float] = {"QB": 1000.0, "RB": 800.0, "WR": 700.0, "TE": 600.0}
REFERENCE_LEAGUE_SIZE = 12

THIN_COVERAGE = 0.5
SURPLUS_RATIO = 1.5
NEED_RATIO = 0.5
BENCH_DEPTH = 6
BENCH_WEIGHT = 0.1
INDEX_SCALE = 10000.0

RISK_STATUSES = frozenset({"IR", "OUT", "DOUBTFUL"})
AGING_RB_AGE = 26.0


@dataclass(frozen=True)
class ImpactReport:
    delta_now: float
    delta_future: float
    delta_composite: float
    timeline_fit: FitLabel
    fit_score: float
    flags: Tuple[str, ...] = ()


def timeline_fit_score(timeline: Timeline, delta_now: float, delta_future: float) -> float:
    """Score in [-1, 1] describing how well a now/future swing suits a timeline.

    The tilt is +1 for a pure win-now gain and -1 for a pure future gain.
    Gaining on both axes never scores below zero; losing on both never scores
    above it.
    """

    spread = abs(delta_now) + abs(delta_future)
    if spread == 0:
        return 0.0
    tilt = (delta_now - delta_future) / spread
    if timeline == "contend":
        value = tilt
    elif timeline == "rebuild":
        value = -tilt
    else:
        value = 1.0 - 2.0 * abs(tilt)
    if delta_now >= 0 and delta_future >= 0:
        value = max(0.0, value)
    elif delta_now <= 0 and delta_future <= 0:
        value = min(0.0, value)
    return max(-1.0, min(1.0, value))


def fit_label(score: float) -> FitLabel:
    if score >= 0.5:
        return "strong"
    if score >= 0.15:
        return "good"
    if score > -0.15:
        return "neutral"
    if score > -0.5:
        return "weak"
    return "poor"


def apply_trade(
    roster: Iterable[ScoredAsset],
    outgoing: Iterable[ScoredAsset],
    incoming: Iterable[ScoredAsset],
) -> List[ScoredAsset]:
    """Return the roster after removing ``outgoing`` and adding ``incoming``."""

    leaving = {asset.asset_id for asset in outgoing}
    result = [asset for asset in roster if asset.asset_id not in leaving]
    present = {asset.asset_id for asset in result}
    for asset in incoming:
        if asset.asset_id not in present:
            result.append(asset)
            present.add(asset.asset_id)
    return result


def _position_counts(roster: Iterable[ScoredAsset]) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for asset in roster:
        if not asset.is_pick:
            counts[asset.position] += 1
    return counts


def roster_flags(profile: TeamProfile, roster: Sequence[ScoredAsset]) -> List[str]:
    settings = profile.league_settings
    starters = settings.starters
    counts = _position_counts(roster)
    flags: List[str] = []
    for position in CORE_POSITIONS:
        required = starters.required(position)
        if required <= 0:
            continue
        if counts.get(position, 0) == 0:
            flags.append(f"critical_gap:{position}")
        elif counts[position] < required:
            flags.append(f"thin:{position}")
    superflex_slots = settings.superflex_slots
    if superflex_slots and counts.get("QB", 0) < starters.QB + superflex_slots:
        flags.append("qb_gap")
    if profile.timeline == "rebuild":
        aging = [
            asset
            for asset in roster
            if asset.position == "RB" and asset.age is not None and asset.age > AGING_RB_AGE
        ]
        if len(aging) >= 2:
            flags.append("age_skew:RB")
    return flags


def analyze_trade_impact(
    profile: TeamProfile,
    outgoing: Sequence[ScoredAsset],
    incoming: Sequence[ScoredAsset],
    *,
    roster: Optional[Sequence[ScoredAsset]] = None,
) -> ImpactReport:
    delta_now = sum(a.now_score for a in incoming) - sum(a.now_score for a in outgoing)
    delta_future = sum(a.future_score for a in incoming) - sum(a.future_score for a in outgoing)
    delta_composite = sum(a.composite for a in incoming) - sum(a.composite for a in outgoing)
    score = timeline_fit_score(profile.timeline, delta_now, delta_future)

    flags: List[str] = []
    for asset in outgoing:
        if not profile.owns(asset.asset_id):
            flags.append(f"not_owned:{asset.asset_id}")
    for asset in incoming:
        if profile.owns(asset.asset_id):
            flags.append(f"already_owned:{asset.asset_id}")
    if roster is not None:
        flags.extend(roster_flags(profile, apply_trade(roster, outgoing, incoming)))

    return ImpactReport(
        delta_now=delta_now,
        delta_future=delta_future,
        delta_composite=delta_composite,
        timeline_fit=fit_label(score),
        fit_score=score,
        flags=tuple(flags),
    )


@dataclass(frozen=True)
class StartingLineup:
    slots: Dict[str, List[ScoredAsset]]
    total_now: float
    total_future: float
    total_composite: float

    @property
    def starters(self) -> List[ScoredAsset]:
        return [asset for slot in SLOT_ORDER for asset in self.slots.get(slot, [])]

    @property
    def starter_ids(self) -> frozenset[str]:
        return frozenset(asset.asset_id for asset in self.starters)


@dataclass(frozen=True)
class DepthCoverage:
    viable: int
    coverage: float


@dataclass(frozen=True)
class RosterFlags:
    qb_gap: bool = False
    thin_depth: Tuple[Tuple[str, float], ...] = ()
    critical_gaps: Tuple[str, ...] = ()
    risk_flags: Tuple[str, ...] = ()
    age_skew: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RosterAnalysis:
    lineup: StartingLineup
    depth: Dict[str, DepthCoverage]
    flags: RosterFlags
    now_index: int
    future_index: int


@dataclass(frozen=True)
class TeamBenchmark:
    team_id: Optional[str]
    now_index: int
    future_index: int
    depth: Dict[str, DepthCoverage]
    flags: RosterFlags
    surplus: Tuple[str, ...] = field(default=())
    needs: Tuple[str, ...] = field(default=())


def replacement_baseline(position: str, settings: LeagueSettings) -> float:
    base = REPLACEMENT_BASELINES.get(position.upper())
    if base is None:
        return 0.0
    return base * settings.league_size / REFERENCE_LEAGUE_SIZE


def _ranked_players(roster: Iterable[ScoredAsset]) -> List[ScoredAsset]:
    players = [asset for asset in roster if not asset.is_pick]
    return sorted(players, key=lambda asset: (-asset.composite, asset.asset_id))


def build_starting_lineup(roster: Iterable[ScoredAsset], settings: LeagueSettings) -> StartingLineup:
    """Fill starter slots greedily by composite value.

    Dedicated positions fill first, then FLEX from RB/WR/TE, then SUPERFLEX
    preferring a QB before falling back to the flex positions.
    """

    ranked = _ranked_players(roster)
    used: set[str] = set()
    slots: Dict[str, List[ScoredAsset]] = {slot: [] for slot in SLOT_ORDER}

    def take(eligible: Iterable[str]) -> Optional[ScoredAsset]:
        allowed = set(eligible)
        for asset in ranked:
            if asset.asset_id not in used and asset.position in allowed:
                used.add(asset.asset_id)
                return asset
        return None

    starters = settings.starters
    for position in CORE_POSITIONS:
        for _ in range(starters.required(position)):
            asset = take((position,))
            if asset is not None:
                slots[position].append(asset)
    for _ in range(starters.FLEX):
        asset = take(FLEX_POSITIONS)
        if asset is not None:
            slots["FLEX"].append(asset)
    for _ in range(settings.superflex_slots):
        asset = take(("QB",)) or take(FLEX_POSITIONS)
        if asset is not None:
            slots["SUPERFLEX"].append(asset)

    chosen = [asset for slot in SLOT_ORDER for asset in slots[slot]]
    return StartingLineup(
        slots=slots,
        total_now=sum(asset.now_score for asset in chosen),
        total_future=sum(asset.future_score for asset in chosen),
        total_composite=sum(asset.composite for asset in chosen),
    )


def depth_coverage(
    roster: Iterable[ScoredAsset],
    lineup: StartingLineup,
    settings: LeagueSettings,
) -> Dict[str, DepthCoverage]:
    starter_ids = lineup.starter_ids
    bench = [asset for asset in _ranked_players(roster) if asset.asset_id not in starter_ids]
    coverage: Dict[str, DepthCoverage] = {}
    for position in CORE_POSITIONS:
        baseline = replacement_baseline(position, settings)
        viable = sum(1 for asset in bench if asset.position == position and asset.composite >= baseline)
        required = settings.starters.required(position)
        coverage[position] = DepthCoverage(viable=viable, coverage=viable / required if required > 0 else 0.0)
    return coverage


def _team_indices(roster: Iterable[ScoredAsset], lineup: StartingLineup) -> Tuple[int, int]:
    starter_ids = lineup.starter_ids
    bench = [asset for asset in _ranked_players(roster) if asset.asset_id not in starter_ids][:BENCH_DEPTH]
    bench_now = sum(asset.now_score for asset in bench)
    bench_future = sum(asset.future_score for asset in bench)
    now_index = min(100.0, (lineup.total_now + bench_now * BENCH_WEIGHT) / INDEX_SCALE * 100.0)
    future_index = min(100.0, (lineup.total_future + bench_future * BENCH_WEIGHT) / INDEX_SCALE * 100.0)
    return round(now_index), round(future_index)


def analyze_roster(profile: TeamProfile, roster: Sequence[ScoredAsset]) -> RosterAnalysis:
    settings = profile.league_settings
    lineup = build_starting_lineup(roster, settings)
    depth = depth_coverage(roster, lineup, settings)
    counts = _position_counts(roster)

    starters = settings.starters
    qb_gap = False
    if settings.superflex_slots:
        starting_qbs = len(lineup.slots["QB"]) + sum(
            1 for asset in lineup.slots["SUPERFLEX"] if asset.position == "QB"
        )
        qb_gap = starting_qbs < starters.QB + settings.superflex_slots

    thin = tuple((position, data.coverage) for position, data in depth.items() if data.coverage < THIN_COVERAGE)
    critical = tuple(
        position for position in CORE_POSITIONS if starters.required(position) > 0 and counts.get(position, 0) == 0
    )

    risk_flags: List[str] = []
    injured = [
        asset
        for asset in lineup.starters
        if isinstance(asset.asset, PlayerAsset) and asset.asset.status.upper() in RISK_STATUSES
    ]
    if injured:
        risk_flags.append(f"{len(injured)} injured/out players in starting lineup")

    age_skew: List[str] = []
    if profile.timeline == "rebuild":
        aging = [
            asset
            for asset in lineup.starters
            if asset.position == "RB" and asset.age is not None and asset.age > AGING_RB_AGE
        ]
        if len(aging) > 1:
            age_skew.append(f"Multiple aging RBs ({len(aging)}) on rebuild timeline")

    now_index, future_index = _team_indices(roster, lineup)
    return RosterAnalysis(
        lineup=lineup,
        depth=depth,
        flags=RosterFlags(
            qb_gap=qb_gap,
            thin_depth=thin,
            critical_gaps=critical,
            risk_flags=tuple(risk_flags),
            age_skew=tuple(age_skew),
        ),
        now_index=now_index,
        future_index=future_index,
    )


def team_benchmark(profile: TeamProfile, roster: Sequence[ScoredAsset]) -> TeamBenchmark:
    """Summarise a roster into indices plus surplus and need positions."""

    analysis = analyze_roster(profile, roster)
    surplus: List[str] = []
    needs: List[str] = []
    for position in CORE_POSITIONS:
        required = profile.league_settings.starters.required(position)
        if required <= 0:
            continue
        viable = analysis.depth[position].viable
        if viable >= required * SURPLUS_RATIO:
            surplus.append(position)
        elif viable == 0 or viable < required * NEED_RATIO:
            needs.append(position)
    for position in analysis.flags.critical_gaps:
        if position not in needs:
            needs.append(position)
    return TeamBenchmark(
        team_id=profile.team_id,
        now_index=analysis.now_index,
        future_index=analysis.future_index,
        depth=analysis.depth,
        flags=analysis.flags,
        surplus=tuple(surplus),
        needs=tuple(needs),
    )
