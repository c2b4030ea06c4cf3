"""League-setting adjustments applied to raw player value."""

from __future__ import annotations

import logging
from typing import Dict, Mapping

from dynasty.models import LeagueSettings


logger = logging.getLogger(__name__)

SUPERFLEX_QB_BONUS = 0.3
FALLBACK_FORMAT = "Standard"

QB_POSITIONS = frozenset({"QB"})
TE_POSITIONS = frozenset({"TE"})

SCARCITY_MIN_MULTIPLIER = 0.9
SCARCITY_MAX_MULTIPLIER = 1.15
SCARCITY_RATIO_BOUNDS = (0.5, 2.0)

# Replacement ranks of the reference 12-team league.
BASE_REPLACEMENT_RANKS: Dict[str, float] = {"QB": 12.0, "RB": 24.0, "WR": 24.0, "TE": 12.0}
FLEX_SHARE: Dict[str, float] = {"RB": 0.4, "WR": 0.4, "TE": 0.2}
SUPERFLEX_QB_SHARE = 0.5
REFERENCE_SETTINGS = LeagueSettings()


def replacement_rank(position: str, settings: LeagueSettings) -> float | None:
    """Rank of the last startable player at ``position`` across the league."""

    position = position.upper()
    if position not in BASE_REPLACEMENT_RANKS:
        return None
    starters = settings.starters
    slots = float(starters.required(position))
    if position in QB_POSITIONS:
        slots += starters.SUPERFLEX * SUPERFLEX_QB_SHARE
    else:
        slots += starters.FLEX * FLEX_SHARE[position]
    return settings.league_size * slots


def scarcity_multiplier(position: str, settings: LeagueSettings) -> float:
    rank = replacement_rank(position, settings)
    if rank is None:
        return 1.0
    low, high = SCARCITY_RATIO_BOUNDS
    ratio = BASE_REPLACEMENT_RANKS[position.upper()] / rank if rank > 0 else high
    ratio = max(low, min(high, ratio))
    span = SCARCITY_MAX_MULTIPLIER - SCARCITY_MIN_MULTIPLIER
    return round(SCARCITY_MIN_MULTIPLIER + (ratio - low) * span / (high - low), 2)


class SettingsAdjuster:
    """Scale raw values by scoring format, roster scarcity, superflex and TE premium.

    The adjustment is linear in the raw value, so ``adjust(x)`` always equals
    ``max(0, x * factor(position, settings))``. Scarcity is measured against
    the default 12-team lineup, which therefore scales by exactly 1.
    """

    def __init__(self, scoring_multipliers: Mapping[str, float]):
        self._scoring_multipliers = dict(scoring_multipliers)

    def format_multiplier(self, scoring_format: str) -> float:
        multiplier = self._scoring_multipliers.get(scoring_format)
        if multiplier is not None:
            return float(multiplier)
        logger.debug("No multiplier for scoring format %r; using %s", scoring_format, FALLBACK_FORMAT)
        return float(self._scoring_multipliers.get(FALLBACK_FORMAT, 1.0))

    def scarcity(self, position: str, settings: LeagueSettings) -> float:
        return scarcity_multiplier(position, settings) / scarcity_multiplier(position, REFERENCE_SETTINGS)

    def factor(self, position: str, settings: LeagueSettings) -> float:
        position = position.upper()
        value = self.format_multiplier(settings.scoring_format)
        value *= self.scarcity(position, settings)
        if settings.superflex and position in QB_POSITIONS:
            value += value * SUPERFLEX_QB_BONUS
        if position in TE_POSITIONS and settings.te_premium > 0:
            value *= 1.0 + settings.te_premium
        return value

    def adjust(self, raw_value: float, position: str, settings: LeagueSettings) -> float:
        return max(0.0, raw_value * self.factor(position, settings))
