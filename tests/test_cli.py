import json
from pathlib import Path

import pytest

from dynasty.cli import main
from dynasty.config_loader import ConfigBundle
from dynasty.persistence import DB_PATH_ENV


def _player(asset_id: str, position: str = "WR", value: float = 4000, **extra) -> dict:
    data = {
        "kind": "player",
        "asset_id": asset_id,
        "name": asset_id.title(),
        "position": position,
        "age": 24,
        "market_value": value,
        "proj_now": value,
        "proj_future": value,
    }
    data.update(extra)
    return data


@pytest.fixture(autouse=True)
def _isolated_db(monkeypatch):
    monkeypatch.delenv(DB_PATH_ENV, raising=False)


def test_evaluate_prints_verdict(tmp_path: Path, capsys):
    trade = tmp_path / "trade.json"
    trade.write_text(
        json.dumps(
            {
                "team_a": [_player("wr1")],
                "team_b": [_player("wr2", value=3950), {"kind": "pick", "asset_id": "2026-4", "year": 2026, "round": 4}],
            }
        )
    )
    output = tmp_path / "report.json"
    assert main(["evaluate", str(trade), "--output", str(output)]) == 0
    out = capsys.readouterr().out
    assert "Verdict:" in out
    report = json.loads(output.read_text())
    assert report["verdict"] in {"FAIR", "FAVORS_A", "FAVORS_B"}
    assert [item["asset"]["asset_id"] for item in report["team_b"]] == ["wr2", "2026-4"]


def test_evaluate_with_preset_and_bad_settings(tmp_path: Path, capsys):
    trade = tmp_path / "trade.json"
    trade.write_text(json.dumps({"team_a": [_player("qb1", "QB")], "team_b": [_player("wr1")], "settings": {"league_size": 0}}))
    assert main(["evaluate", str(trade)]) == 2
    assert "league_size" in capsys.readouterr().err
    assert main(["--preset", "NOPE", "evaluate", str(trade)]) == 2


def test_malformed_input_files_exit_with_usage_error(tmp_path: Path, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert main(["evaluate", str(broken)]) == 2
    assert "Could not read input" in capsys.readouterr().err

    bad_asset = tmp_path / "bad_asset.json"
    bad_asset.write_text(json.dumps({"team_a": [{"kind": "player", "asset_id": "x"}], "team_b": []}))
    assert main(["evaluate", str(bad_asset)]) == 2
    assert "Invalid input" in capsys.readouterr().err

    assert main(["evaluate", str(tmp_path / "missing.json")]) == 2
    assert main(["--config", str(broken), "evaluate", str(bad_asset)]) == 2


def test_proposals_lists_fair_swaps(tmp_path: Path, capsys):
    rosters = tmp_path / "rosters.json"
    rosters.write_text(
        json.dumps(
            {
                "mine": [_player("wr1"), _player("rb1", "RB", 1500)],
                "theirs": [_player("wr2"), _player("te1", "TE", 9000)],
                "settings": {"scoring_format": "Half"},
            }
        )
    )
    assert main(["proposals", str(rosters), "--band", "0.05", "--max-side", "1", "--seconds", "5"]) == 0
    out = capsys.readouterr().out
    assert "give wr1 for wr2" in out


def test_calibrate_reports_insufficient_data(tmp_path: Path, capsys):
    outcomes = tmp_path / "outcomes.json"
    outcomes.write_text(json.dumps([{"asset": _player("p1"), "realized_value": 100}]))
    assert main(["calibrate", str(outcomes), "--db", str(tmp_path / "runs.sqlite")]) == 1
    assert "Calibration failed" in capsys.readouterr().out


def test_calibrate_saves_candidate(tmp_path: Path, capsys):
    positions = ["QB", "RB", "WR", "TE"]
    outcomes = tmp_path / "outcomes.json"
    outcomes.write_text(
        json.dumps(
            [
                {
                    "asset": _player(
                        f"p{i}",
                        positions[i % 4],
                        1000 + 100 * i,
                        age=22 + i % 7,
                        proj_future=300 + 250 * i,
                    ),
                    "realized_value": 300 + 260 * i,
                }
                for i in range(24)
            ]
        )
    )
    saved = tmp_path / "bundle.json"
    assert main(["calibrate", str(outcomes), "--db", str(tmp_path / "runs.sqlite"), "--save", str(saved)]) == 0
    out = capsys.readouterr().out
    assert "completed" in out
    bundle = ConfigBundle.load(saved)
    assert bundle.candidate.version == 2
    assert bundle.active.version == 1
