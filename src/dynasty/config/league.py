"""League settings defaults, presets and validation."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from dynasty.errors import ValidationError
from dynasty.models import LeagueSettings, StarterSlots


DEFAULT_SETTINGS = LeagueSettings()

_PRESETS: Dict[str, LeagueSettings] = {
    "1QB_PPR": DEFAULT_SETTINGS,
    "1QB_HALF": LeagueSettings(scoring_format="Half"),
    "1QB_STANDARD": LeagueSettings(scoring_format="Standard"),
    "SF_PPR": LeagueSettings(
        superflex=True,
        starters=StarterSlots(SUPERFLEX=1),
    ),
    "SF_TEP": LeagueSettings(
        superflex=True,
        te_premium=0.5,
        starters=StarterSlots(SUPERFLEX=1),
    ),
    "10_TEAM_SF": LeagueSettings(
        superflex=True,
        league_size=10,
        starters=StarterSlots(SUPERFLEX=1),
    ),
}


def iter_presets() -> Iterable[str]:
    """Return the configured preset keys."""

    return _PRESETS.keys()


def get_preset(key: str) -> LeagueSettings:
    """Fetch a named preset, raising KeyError if missing."""

    normalized = key.upper()
    if normalized not in _PRESETS:
        raise KeyError(f"No league settings preset named {key!r}")
    return _PRESETS[normalized]


def validate_settings(settings: LeagueSettings | Mapping[str, Any] | None) -> LeagueSettings:
    """Merge a partial settings mapping onto the defaults and validate it.

    Invalid values raise :class:`dynasty.errors.ValidationError` naming the
    offending field instead of being replaced by defaults.
    """

    if settings is None:
        return DEFAULT_SETTINGS
    if isinstance(settings, LeagueSettings):
        payload: dict[str, Any] = settings.model_dump()
    else:
        payload = DEFAULT_SETTINGS.model_dump()
        for key, value in settings.items():
            if key == "starters" and isinstance(value, Mapping):
                payload["starters"] = {**payload["starters"], **value}
            else:
                payload[key] = value
    try:
        return LeagueSettings.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise ValidationError(field, first.get("msg", "invalid value")) from exc
