"""Environment overrides for search and calibration limits."""

from __future__ import annotations

import logging
import os


logger = logging.getLogger(__name__)

FAIRNESS_BAND_ENV = "DYNASTY_FAIRNESS_BAND"
MAX_EVALUATIONS_ENV = "DYNASTY_MAX_EVALUATIONS"
SEARCH_SECONDS_ENV = "DYNASTY_SEARCH_SECONDS"
MIN_SAMPLES_ENV = "DYNASTY_MIN_CALIBRATION_SAMPLES"

FAIRNESS_BAND_DEFAULT = 0.10
MAX_EVALUATIONS_DEFAULT = 50_000
SEARCH_SECONDS_DEFAULT = 2.0
MIN_SAMPLES_DEFAULT = 20


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def fairness_band(default: float = FAIRNESS_BAND_DEFAULT) -> float:
    return _env_float(FAIRNESS_BAND_ENV, default, clamp_min=0.0, clamp_max=1.0)


def max_evaluations() -> int:
    return _env_int(MAX_EVALUATIONS_ENV, MAX_EVALUATIONS_DEFAULT, min_value=1)


def search_seconds() -> float:
    return _env_float(SEARCH_SECONDS_ENV, SEARCH_SECONDS_DEFAULT, clamp_min=0.0)


def min_calibration_samples() -> int:
    return _env_int(MIN_SAMPLES_ENV, MIN_SAMPLES_DEFAULT, min_value=2)
