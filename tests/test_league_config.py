import pytest

from dynasty.config import DEFAULT_SETTINGS, default_app_config, get_preset, iter_presets, validate_settings
from dynasty.config import env
from dynasty.errors import ValidationError


def test_get_preset_is_case_insensitive():
    settings = get_preset("sf_ppr")
    assert settings.superflex is True
    assert settings.starters.SUPERFLEX == 1


def test_get_preset_missing_raises():
    with pytest.raises(KeyError):
        get_preset("CURLING")


def test_iter_presets_includes_defaults():
    assert "1QB_PPR" in set(iter_presets())


def test_validate_settings_merges_partial_mapping():
    settings = validate_settings({"scoring_format": "Half", "starters": {"QB": 2}})
    assert settings.scoring_format == "Half"
    assert settings.starters.QB == 2
    assert settings.starters.RB == DEFAULT_SETTINGS.starters.RB


def test_validate_settings_none_returns_defaults():
    assert validate_settings(None) == DEFAULT_SETTINGS


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"league_size": 0}, "league_size"),
        ({"scoring_format": "Points"}, "scoring_format"),
        ({"te_premium": -0.5}, "te_premium"),
    ],
)
def test_validate_settings_rejects_invalid_values(payload, field):
    with pytest.raises(ValidationError) as excinfo:
        validate_settings(payload)
    assert excinfo.value.field == field


def test_default_app_config_is_active():
    config = default_app_config()
    assert config.status == "active"
    assert config.version == 1
    assert set(config.age_curves) == {"QB", "RB", "WR", "TE"}
    assert set(config.future_age_curves) == {"QB", "RB", "WR", "TE"}


def test_env_overrides_fall_back_on_invalid_values(monkeypatch):
    monkeypatch.setenv(env.FAIRNESS_BAND_ENV, "wide")
    monkeypatch.setenv(env.MAX_EVALUATIONS_ENV, "lots")
    assert env.fairness_band() == env.FAIRNESS_BAND_DEFAULT
    assert env.max_evaluations() == env.MAX_EVALUATIONS_DEFAULT


def test_env_overrides_are_clamped(monkeypatch):
    monkeypatch.setenv(env.FAIRNESS_BAND_ENV, "1.5")
    monkeypatch.setenv(env.MAX_EVALUATIONS_ENV, "0")
    monkeypatch.setenv(env.MIN_SAMPLES_ENV, "1")
    assert env.fairness_band() == 1.0
    assert env.max_evaluations() == 1
    assert env.min_calibration_samples() == 2
