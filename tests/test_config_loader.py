from pathlib import Path

import pytest

from dynasty.config import default_app_config
from dynasty.config_loader import ConfigBundle
from dynasty.errors import ValidationError
from dynasty.models import ModelWeights


def test_bundle_round_trip(tmp_path: Path):
    candidate = default_app_config().model_copy(
        update={"status": "candidate", "version": 2, "weights": ModelWeights(alpha=0.55)}
    )
    path = tmp_path / "config.json"
    ConfigBundle(active=default_app_config(), candidate=candidate).save(path)

    loaded = ConfigBundle.load(path)
    assert loaded.active.status == "active"
    assert loaded.active.weights == default_app_config().weights
    assert loaded.candidate.version == 2
    assert loaded.candidate.weights.alpha == pytest.approx(0.55)
    assert loaded.candidate.picks.round_multipliers[1] == pytest.approx(1.0)


def test_bundle_without_candidate(tmp_path: Path):
    path = tmp_path / "config.json"
    ConfigBundle.default().save(path)
    assert ConfigBundle.load(path).candidate is None


def test_bundle_rejects_swapped_statuses():
    candidate = default_app_config().model_copy(update={"status": "candidate"})
    with pytest.raises(ValidationError) as excinfo:
        ConfigBundle(active=candidate)
    assert excinfo.value.field == "active"
    with pytest.raises(ValidationError) as excinfo:
        ConfigBundle(active=default_app_config(), candidate=default_app_config())
    assert excinfo.value.field == "candidate"
