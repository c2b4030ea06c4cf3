"""Bounded search for fair, mutually beneficial trades between two rosters."""

from __future__ import annotations

import logging
import math
import time
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterator, List, Literal, Optional, Sequence, Tuple

from dynasty.analysis import ImpactReport, analyze_trade_impact, roster_flags
from dynasty.config import env
from dynasty.errors import ComputationError, EngineError, ValidationError
from dynasty.models import ScoredAsset, TeamProfile, Timeline


logger = logging.getLogger(__name__)

Objective = Literal["win-now", "balanced", "future-lean"]

OBJECTIVES: Tuple[str, ...] = ("win-now", "balanced", "future-lean")
OBJECTIVE_METRICS: Dict[str, str] = {"win-now": "now", "balanced": "composite", "future-lean": "future"}
OBJECTIVE_TIMELINES: Dict[str, Timeline] = {"win-now": "contend", "balanced": "retool", "future-lean": "rebuild"}
DEFAULT_FAIRNESS_BANDS: Dict[str, float] = {"win-now": 0.10, "balanced": 0.10, "future-lean": 0.10}

DEFAULT_MAX_SIDE = 2
MAX_SIDE_LIMIT = 3
DEFAULT_MAX_POOL = 25
OPPONENT_DEFAULT_TIMELINE: Timeline = "retool"


@dataclass(frozen=True)
class Proposal:
    give: frozenset[str]
    get: frozenset[str]
    fairness_delta: float
    rationale: str
    objective: Objective
    give_total: float
    get_total: float
    mutual_benefit: float

    @property
    def assets_exchanged(self) -> int:
        return len(self.give) + len(self.get)

    def sort_key(self) -> tuple:
        return (
            self.fairness_delta,
            -self.mutual_benefit,
            self.assets_exchanged,
            tuple(sorted(self.give)),
            tuple(sorted(self.get)),
        )


@dataclass(frozen=True)
class SearchBudget:
    """Effort bound for one search; unset limits fall back to the environment."""

    max_evaluations: Optional[int] = field(default_factory=env.max_evaluations)
    time_budget_seconds: Optional[float] = field(default_factory=env.search_seconds)
    max_candidates: Optional[int] = None

    @classmethod
    def unbounded(cls) -> "SearchBudget":
        return cls(max_evaluations=None, time_budget_seconds=None, max_candidates=None)


@dataclass(frozen=True)
class ProposalSearch:
    proposals: List[Proposal]
    evaluated: int
    truncated: bool
    elapsed_seconds: float = 0.0


def fairness_delta(give_total: float, get_total: float) -> float:
    larger = max(give_total, get_total)
    if larger <= 0:
        return 0.0
    return abs(give_total - get_total) / larger


def default_fairness_band(objective: str) -> float:
    return env.fairness_band(DEFAULT_FAIRNESS_BANDS.get(objective, env.FAIRNESS_BAND_DEFAULT))


def _band_window(total: float, band: float) -> Tuple[float, float]:
    """Counter totals ``x`` with ``|total - x| / max(total, x) <= band``."""

    lower = total * (1.0 - band)
    upper = math.inf if band >= 1.0 else total / (1.0 - band)
    return lower, upper


def _candidate_pool(assets: Sequence[ScoredAsset], metric: str, max_pool: int) -> List[ScoredAsset]:
    ranked = sorted(assets, key=lambda asset: (-asset.metric(metric), asset.asset_id))
    return ranked[:max_pool]


def _subsets(pool: Sequence[ScoredAsset], max_side: int) -> Iterator[Tuple[ScoredAsset, ...]]:
    for size in range(1, max_side + 1):
        yield from combinations(pool, size)


def _critical_gaps(profile: TeamProfile, roster: Sequence[ScoredAsset]) -> frozenset[str]:
    return frozenset(flag for flag in roster_flags(profile, roster) if flag.startswith("critical_gap:"))


def _new_critical_gap(report: ImpactReport, existing: frozenset[str]) -> bool:
    return any(flag.startswith("critical_gap:") and flag not in existing for flag in report.flags)


def _describe(assets: Sequence[ScoredAsset]) -> str:
    return ", ".join(asset.label for asset in assets)


def _rationale(
    give: Sequence[ScoredAsset],
    get: Sequence[ScoredAsset],
    metric: str,
    give_total: float,
    get_total: float,
    mine: ImpactReport,
    theirs: ImpactReport,
    my_timeline: str,
    their_timeline: str,
) -> str:
    return (
        f"Give {_describe(give)} ({metric} {give_total:,.0f}) for {_describe(get)} ({metric} {get_total:,.0f}); "
        f"you: {mine.timeline_fit} fit for {my_timeline}, they: {theirs.timeline_fit} fit for {their_timeline}"
    )


def search_proposals(
    my_assets: Sequence[ScoredAsset],
    their_assets: Sequence[ScoredAsset],
    objective: str = "balanced",
    *,
    fairness_band: Optional[float] = None,
    max_side: int = DEFAULT_MAX_SIDE,
    max_pool: int = DEFAULT_MAX_POOL,
    budget: Optional[SearchBudget] = None,
    my_profile: Optional[TeamProfile] = None,
    their_profile: Optional[TeamProfile] = None,
) -> ProposalSearch:
    """Enumerate bounded give/get subsets whose totals fall inside the fairness band.

    Counter-subsets are indexed by total so each give subset only visits the
    slice of the index that can satisfy the band. Surviving pairs are scored
    for mutual benefit and ranked by fairness delta, mutual benefit, number of
    assets exchanged and finally asset ids.
    """

    if objective not in OBJECTIVE_METRICS:
        raise ValidationError("objective", f"expected one of {', '.join(OBJECTIVES)}, got {objective!r}")
    if not 1 <= max_side <= MAX_SIDE_LIMIT:
        raise ValidationError("max_side", f"must be between 1 and {MAX_SIDE_LIMIT}, got {max_side}")
    if max_pool < 1:
        raise ValidationError("max_pool", f"must be positive, got {max_pool}")
    band = default_fairness_band(objective) if fairness_band is None else fairness_band
    if not (0.0 <= band <= 1.0) or math.isnan(band):
        raise ValidationError("fairness_band", f"must lie in [0, 1], got {band}")
    budget = budget or SearchBudget()

    metric = OBJECTIVE_METRICS[objective]
    use_profiles = my_profile is not None or their_profile is not None
    my_side = my_profile or TeamProfile(timeline=OBJECTIVE_TIMELINES[objective])
    their_side = their_profile or TeamProfile(timeline=OPPONENT_DEFAULT_TIMELINE)
    my_roster = list(my_assets)
    their_roster = list(their_assets)
    my_existing = _critical_gaps(my_side, my_roster) if use_profiles else frozenset()
    their_existing = _critical_gaps(their_side, their_roster) if use_profiles else frozenset()

    shared = {a.asset_id for a in my_roster} & {a.asset_id for a in their_roster}
    if shared:
        logger.debug("Ignoring %d asset(s) listed on both rosters", len(shared))
    my_pool = _candidate_pool([a for a in my_roster if a.asset_id not in shared], metric, max_pool)
    their_pool = _candidate_pool([a for a in their_roster if a.asset_id not in shared], metric, max_pool)

    index = sorted(
        (
            (sum(asset.metric(metric) for asset in subset), tuple(sorted(a.asset_id for a in subset)), subset)
            for subset in _subsets(their_pool, max_side)
        ),
        key=lambda entry: (entry[0], entry[1]),
    )
    totals = [entry[0] for entry in index]

    start = time.perf_counter()
    evaluated = 0
    truncated = False
    candidates: List[Proposal] = []

    try:
        for give in _subsets(my_pool, max_side):
            give_total = sum(asset.metric(metric) for asset in give)
            if give_total <= 0:
                continue
            lower, upper = _band_window(give_total, band)
            for position in range(bisect_left(totals, lower), bisect_right(totals, upper)):
                if budget.max_evaluations is not None and evaluated >= budget.max_evaluations:
                    truncated = True
                    break
                if budget.time_budget_seconds is not None and time.perf_counter() - start >= budget.time_budget_seconds:
                    truncated = True
                    break
                evaluated += 1

                get_total, _, get = index[position]
                if get_total <= 0:
                    continue
                delta = fairness_delta(give_total, get_total)
                if delta > band:
                    continue

                mine = analyze_trade_impact(
                    my_side, list(give), list(get), roster=my_roster if use_profiles else None
                )
                theirs = analyze_trade_impact(
                    their_side, list(get), list(give), roster=their_roster if use_profiles else None
                )
                if use_profiles and (
                    _new_critical_gap(mine, my_existing) or _new_critical_gap(theirs, their_existing)
                ):
                    continue

                candidates.append(
                    Proposal(
                        give=frozenset(asset.asset_id for asset in give),
                        get=frozenset(asset.asset_id for asset in get),
                        fairness_delta=delta,
                        rationale=_rationale(
                            give, get, metric, give_total, get_total, mine, theirs,
                            my_side.timeline, their_side.timeline,
                        ),
                        objective=objective,
                        give_total=give_total,
                        get_total=get_total,
                        mutual_benefit=mine.fit_score + theirs.fit_score,
                    )
                )
                if budget.max_candidates is not None and len(candidates) >= budget.max_candidates:
                    truncated = True
                    break
            if truncated:
                break
    except EngineError:
        raise
    except Exception as exc:
        raise ComputationError(f"Proposal search failed: {exc}") from exc

    candidates.sort(key=Proposal.sort_key)
    elapsed = time.perf_counter() - start
    if truncated:
        logger.warning(
            "Proposal search truncated after %d evaluations (%.3fs); %d candidates kept",
            evaluated,
            elapsed,
            len(candidates),
        )
    else:
        logger.info(
            "Proposal search evaluated %d pairs in %.3fs; %d candidates within band %.2f",
            evaluated,
            elapsed,
            len(candidates),
            band,
        )
    return ProposalSearch(proposals=candidates, evaluated=evaluated, truncated=truncated, elapsed_seconds=elapsed)


def generate_proposals(
    my_assets: Sequence[ScoredAsset],
    their_assets: Sequence[ScoredAsset],
    objective: str = "balanced",
    *,
    limit: Optional[int] = None,
    **kwargs,
) -> List[Proposal]:
    proposals = search_proposals(my_assets, their_assets, objective, **kwargs).proposals
    if limit is not None:
        return proposals[:limit]
    return proposals
