"""Position-specific age decay lookups."""

from __future__ import annotations

import logging
from typing import Mapping

from dynasty.models import AgeCurve


logger = logging.getLogger(__name__)

NEUTRAL_MULTIPLIER = 1.0


class AgeCurveModel:
    """Resolve age multipliers from a per-position curve table.

    Positions without a curve (kickers, defenses, typos in upstream feeds)
    score with a neutral multiplier rather than failing the whole valuation.
    """

    def __init__(self, curves: Mapping[str, AgeCurve]):
        self._curves = {position.upper(): curve for position, curve in curves.items()}

    @property
    def positions(self) -> tuple[str, ...]:
        return tuple(sorted(self._curves))

    def curve_for(self, position: str) -> AgeCurve | None:
        return self._curves.get(position.upper())

    def multiplier_for(self, position: str, age: float) -> float:
        curve = self.curve_for(position)
        if curve is None:
            logger.debug("No age curve for position %r; using neutral multiplier", position)
            return NEUTRAL_MULTIPLIER
        return curve.multiplier_for(age)
