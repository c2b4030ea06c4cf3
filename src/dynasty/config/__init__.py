"""Configuration helpers for league settings and scoring defaults."""

from .defaults import (
    DEFAULT_AGE_CURVES,
    DEFAULT_FUTURE_AGE_CURVES,
    DEFAULT_SCORING_MULTIPLIERS,
    DEFAULT_SEASON,
    DEFAULT_WEIGHTS,
    default_app_config,
)
from .league import DEFAULT_SETTINGS, get_preset, iter_presets, validate_settings

__all__ = [
    "DEFAULT_AGE_CURVES",
    "DEFAULT_FUTURE_AGE_CURVES",
    "DEFAULT_SCORING_MULTIPLIERS",
    "DEFAULT_SEASON",
    "DEFAULT_WEIGHTS",
    "default_app_config",
    "DEFAULT_SETTINGS",
    "get_preset",
    "iter_presets",
    "validate_settings",
]
