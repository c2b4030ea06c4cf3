"""Lightweight REST client for the dynasty engine API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {path}: {exc}") from exc


def show(resp: httpx.Response) -> None:
    if resp.status_code >= 400:
        raise SystemExit(f"{resp.request.method} {resp.request.url.path} failed ({resp.status_code}): {resp.text}")
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the dynasty engine REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--score", type=Path, metavar="JSON", help="POST a {assets, settings} body to /assets/score")
    parser.add_argument("--evaluate", type=Path, metavar="JSON", help="POST a {team_a, team_b, settings} body")
    parser.add_argument("--league", type=Path, metavar="JSON", help="Upload a league snapshot")
    parser.add_argument("--league-id", help="League for matchmaking/proposals")
    parser.add_argument("--team-id", help="Team requesting matchmaking/proposals")
    parser.add_argument("--opponent-id", help="Opponent for proposal search")
    parser.add_argument("--objective", default="balanced", choices=("win-now", "balanced", "future-lean"))
    parser.add_argument("--calibrate", type=Path, metavar="JSON", help="POST outcomes to /admin/calibration/run")
    parser.add_argument("--list-runs", action="store_true", help="List recent calibration runs and exit")
    parser.add_argument("--timeout", type=float, default=30.0)
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        if args.list_runs:
            show(client.get("/admin/calibration"))
            return
        if args.score:
            show(client.post("/assets/score", json=load_json(args.score)))
        if args.evaluate:
            show(client.post("/trades/evaluate", json=load_json(args.evaluate)))
        if args.league:
            show(client.post("/leagues", json=load_json(args.league)))
        if args.league_id and args.team_id:
            params = {"team_id": args.team_id, "objective": args.objective}
            if args.opponent_id:
                params["opponent_id"] = args.opponent_id
                show(client.get(f"/league/{args.league_id}/proposals", params=params))
            else:
                show(client.get(f"/league/{args.league_id}/matchmaking", params=params))
        if args.calibrate:
            payload = load_json(args.calibrate)
            if isinstance(payload, list):
                payload = {"outcomes": payload}
            show(client.post("/admin/calibration/run", json=payload))


if __name__ == "__main__":
    main()
