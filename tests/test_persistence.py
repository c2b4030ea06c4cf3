from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dynasty.calibration import CalibrationEngine
from dynasty.config import default_app_config
from dynasty.errors import ConflictError, NotFoundError, ValidationError
from dynasty.models import CalibrationMetrics, CalibrationRun, HistoricalOutcome, PlayerAsset
from dynasty.persistence import DB_PATH_ENV, CalibrationStore


@pytest.fixture
def store(tmp_path: Path, monkeypatch) -> CalibrationStore:
    monkeypatch.delenv(DB_PATH_ENV, raising=False)
    return CalibrationStore(tmp_path / "runs.sqlite")


def _run(run_id: str, started_at: datetime | None = None) -> CalibrationRun:
    return CalibrationRun(run_id=run_id, started_at=started_at or datetime.now(timezone.utc))


def test_env_path_overrides_explicit_path(tmp_path: Path, monkeypatch):
    env_path = tmp_path / "env.sqlite"
    monkeypatch.setenv(DB_PATH_ENV, str(env_path))
    store = CalibrationStore(tmp_path / "ignored.sqlite")
    assert store.db_path == env_path
    assert env_path.exists()
    assert not (tmp_path / "ignored.sqlite").exists()


def test_begin_and_finish_round_trip(store: CalibrationStore):
    running = store.begin(_run("cal_a"))
    assert running.status == "running"
    assert store.running().run_id == "cal_a"

    candidate = default_app_config().model_copy(update={"status": "candidate", "version": 2, "rollout_percentage": 0.0})
    finished = running.model_copy(
        update={
            "status": "completed",
            "completed_at": datetime.now(timezone.utc),
            "metrics": CalibrationMetrics(overall_rho=0.91, per_position_rho={"WR": 0.88}, sample_size=40),
            "candidate_config": candidate,
        }
    )
    store.finish(finished)

    fetched = store.get("cal_a")
    assert fetched.status == "completed"
    assert fetched.metrics.overall_rho == pytest.approx(0.91)
    assert fetched.metrics.per_position_rho == {"WR": 0.88}
    assert fetched.candidate_config.version == 2
    assert fetched.candidate_config.status == "candidate"
    assert fetched.candidate_config.weights == candidate.weights
    assert store.running() is None


def test_only_one_run_may_be_running(store: CalibrationStore, tmp_path: Path):
    store.begin(_run("cal_a"))
    with pytest.raises(ConflictError):
        store.begin(_run("cal_b"))
    other = CalibrationStore(tmp_path / "runs.sqlite")
    with pytest.raises(ConflictError):
        other.begin(_run("cal_c"))
    assert [run.run_id for run in store.list_runs()] == ["cal_a"]


def test_terminal_state_is_set_once(store: CalibrationStore):
    running = store.begin(_run("cal_a"))
    with pytest.raises(ValidationError):
        store.finish(running)
    failed = running.model_copy(update={"status": "failed", "error": "boom", "completed_at": datetime.now(timezone.utc)})
    store.finish(failed)
    with pytest.raises(ConflictError):
        store.finish(failed.model_copy(update={"status": "completed"}))
    with pytest.raises(NotFoundError):
        store.finish(failed.model_copy(update={"run_id": "cal_missing"}))
    assert store.get("cal_a").error == "boom"
    assert store.get("cal_missing") is None


def test_list_runs_newest_first(store: CalibrationStore):
    base = datetime(2026, 9, 1, tzinfo=timezone.utc)
    for offset, run_id in enumerate(["cal_old", "cal_mid", "cal_new"]):
        running = store.begin(_run(run_id, base + timedelta(days=offset)))
        store.finish(running.model_copy(update={"status": "completed", "completed_at": running.started_at}))
    assert [run.run_id for run in store.list_runs()] == ["cal_new", "cal_mid", "cal_old"]
    assert [run.run_id for run in store.list_runs(limit=1)] == ["cal_new"]


def test_engine_records_runs_in_store(store: CalibrationStore):
    outcomes = [
        HistoricalOutcome(
            asset=PlayerAsset(
                asset_id=f"p{i}",
                name=f"Player {i}",
                position=("QB", "RB", "WR", "TE")[i % 4],
                age=22 + i % 6,
                market_value=800 + 120 * i,
                proj_now=2500 - 40 * i,
                proj_future=300 + 180 * i,
            ),
            realized_value=300 + 200 * i,
        )
        for i in range(25)
    ]
    run = CalibrationEngine(store, min_samples=20).run_calibration(outcomes, default_app_config())
    stored = store.get(run.run_id)
    assert stored.status == "completed"
    assert stored.metrics.sample_size == 25
    assert stored.candidate_config.version == 2
