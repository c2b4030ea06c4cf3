from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from dynasty.api import create_app
from dynasty.models import CalibrationRun
from dynasty.persistence import DB_PATH_ENV


@pytest.fixture
async def client(tmp_path, monkeypatch):
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "api.sqlite"))
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _player(asset_id: str, position: str, value: float = 5000, **extra) -> dict:
    data = {
        "kind": "player",
        "asset_id": asset_id,
        "name": asset_id.upper(),
        "position": position,
        "age": 22,
        "market_value": value,
        "proj_now": value,
        "proj_future": value,
    }
    data.update(extra)
    return data


def _league() -> dict:
    rosters = {
        "a": ["QB", "QB", "QB", "RB", "RB", "WR", "WR", "TE"],
        "b": ["QB", "RB", "RB", "RB", "RB", "RB", "RB", "WR", "WR", "TE"],
        "c": ["QB", "QB", "QB", "WR", "WR"],
    }
    assets = {}
    teams = []
    for team_id, positions in rosters.items():
        ids = []
        for index, position in enumerate(positions):
            asset_id = f"{team_id}_{position.lower()}{index}"
            assets[asset_id] = _player(asset_id, position)
            ids.append(asset_id)
        teams.append({"team_id": team_id, "display_name": f"Team {team_id.upper()}", "asset_ids": ids})
    return {"league_id": "L1", "teams": teams, "assets": assets}


def _outcomes(count: int) -> list[dict]:
    positions = ["QB", "RB", "WR", "TE"]
    return [
        {
            "asset": _player(f"p{i}", positions[i % 4], 1000 + 100 * i, age=22 + i % 7, proj_future=300 + 250 * i),
            "realized_value": 300 + 260 * i,
        }
        for i in range(count)
    ]


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_score_assets(client: AsyncClient):
    qb = _player("qb1", "QB", age=25, market_value=5000, proj_now=4000, proj_future=6000)
    resp = await client.post("/assets/score", json={"assets": [qb], "settings": {"superflex": True}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["config_version"] == 1
    assert "SF" in body["settings_summary"]
    scored = body["assets"][0]
    assert scored["asset_id"] == "qb1"
    assert scored["now_score"] == pytest.approx(4600 * 1.3)
    assert scored["composite"] == pytest.approx((0.4 * 4600 + 0.6 * 5600) * 1.3)


@pytest.mark.anyio
async def test_score_rejects_invalid_assets(client: AsyncClient):
    resp = await client.post("/assets/score", json={"assets": [_player("x", "WR", market_value=-5)]})
    assert resp.status_code == 400
    assert "market_value" in resp.json()["detail"]
    resp = await client.post("/assets/score", json={"assets": [_player("x", "WR")], "settings": {"league_size": 0}})
    assert resp.status_code == 400
    resp = await client.post("/assets/score", json={"assets": []})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_evaluate_trade(client: AsyncClient):
    resp = await client.post(
        "/trades/evaluate",
        json={"team_a": [_player("wr1", "WR")], "team_b": [_player("wr2", "WR")]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["verdict"] == "FAIR"
    assert body["suggestion"] is None
    assert body["team_a"]["composite"] == pytest.approx(body["team_b"]["composite"])

    resp = await client.post("/trades/evaluate", json={"team_a": [], "team_b": []})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_team_analyze_reports_trade_impact(client: AsyncClient):
    roster = [
        _player("qb1", "QB"),
        _player("rb1", "RB"),
        _player("rb2", "RB"),
        _player("wr1", "WR"),
        _player("wr2", "WR"),
        _player("te1", "TE"),
    ]
    profile = {"team_id": "me", "timeline": "contend", "roster": [item["asset_id"] for item in roster]}
    resp = await client.post(
        "/team/analyze",
        json={"profile": profile, "roster": roster, "outgoing": ["te1"], "incoming": [_player("wr9", "WR")]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["team_id"] == "me"
    assert body["starters"]["TE"] == ["te1"]
    assert body["flags"]["critical_gaps"] == []
    assert "critical_gap:TE" in body["impact"]["flags"]

    resp = await client.post("/team/analyze", json={"profile": profile, "roster": roster, "outgoing": ["ghost"]})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_team_recommendations(client: AsyncClient):
    resp = await client.post(
        "/team/recommendations",
        json={
            "team_a": [_player("wr1", "WR", 3000)],
            "team_b": [_player("wr2", "WR", 5000), _player("te1", "TE", 2000)],
            "profile": {"timeline": "rebuild", "risk_tolerance": "high"},
            "limit": 2,
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 2
    assert {item["action"] for item in body} <= {"get", "give"}
    assert body[0]["fit_score"] >= body[1]["fit_score"]


@pytest.mark.anyio
async def test_team_recommendations_balance_a_lopsided_offer(client: AsyncClient):
    resp = await client.post(
        "/team/recommendations",
        json={
            "team_a": [_player("wr1", "WR", 4000), _player("rb9", "RB", 300)],
            "team_b": [_player("wr2", "WR", 5000)],
            "give": ["wr1"],
            "get": ["wr2"],
        },
    )
    assert resp.status_code == 200
    added = [item for item in resp.json() if item["action"] == "add"]
    assert [item["asset"]["asset_id"] for item in added] == ["rb9"]


@pytest.mark.anyio
async def test_league_matchmaking_and_proposals(client: AsyncClient):
    resp = await client.post("/leagues", json=_league())
    assert resp.status_code == 201
    assert resp.json() == {"league_id": "L1", "teams": 3, "assets": 23}

    resp = await client.get("/league/L1/matchmaking", params={"team_id": "a"})
    assert resp.status_code == 200
    ranked = resp.json()
    assert [item["opponent_id"] for item in ranked] == ["b", "c"]
    assert ranked[0]["compatibility_score"] == 85

    resp = await client.get("/league/L1/proposals", params={"team_id": "a", "opponent_id": "b"})
    assert resp.status_code == 200
    proposals = resp.json()
    assert len(proposals) == 3
    assert proposals[0]["give"] == ["a_qb0"]
    assert proposals[0]["get"] == ["b_qb0"]

    resp = await client.get("/league/L1/proposals", params={"team_id": "a", "opponent_id": "a"})
    assert resp.status_code == 400
    resp = await client.get("/league/L1/matchmaking", params={"team_id": "a", "objective": "yolo"})
    assert resp.status_code == 400
    resp = await client.get("/league/L9/matchmaking", params={"team_id": "a"})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_league_with_unknown_assets_is_rejected(client: AsyncClient):
    league = _league()
    league["teams"][0]["asset_ids"].append("ghost")
    resp = await client.post("/leagues", json=league)
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_calibration_insufficient_data(client: AsyncClient):
    resp = await client.post("/admin/calibration/run", json={"outcomes": _outcomes(3)})
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["status"] == "failed"

    resp = await client.get("/admin/calibration")
    runs = resp.json()
    assert [run["run_id"] for run in runs] == [detail["run_id"]]
    assert runs[0]["metrics"]["overall_rho"] is None

    resp = await client.get(f"/admin/calibration/{detail['run_id']}")
    assert resp.status_code == 200
    resp = await client.get("/admin/calibration/cal_missing")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_calibration_publishes_candidate(client: AsyncClient):
    resp = await client.get("/admin/config")
    assert resp.json()["candidate"] is None

    resp = await client.post(
        "/admin/calibration/run",
        json={"outcomes": _outcomes(24), "previous_positions": ["QB"] * 24},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["run"]["status"] == "completed"
    assert any(alert["kind"] == "divergence" for alert in body["alerts"])

    resp = await client.get("/admin/config")
    config = resp.json()
    assert config["active"]["version"] == 1
    assert config["candidate"]["version"] == 2
    assert config["candidate"]["status"] == "candidate"


@pytest.mark.anyio
async def test_calibration_conflict(client: AsyncClient):
    client.app.state.run_registry.begin(CalibrationRun(run_id="cal_busy", started_at=datetime.now(timezone.utc)))
    resp = await client.post("/admin/calibration/run", json={"outcomes": _outcomes(24)})
    assert resp.status_code == 409
