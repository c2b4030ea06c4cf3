"""Command-line interface for trade evaluation, proposal search and calibration."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import pydantic
from pydantic import TypeAdapter

from dynasty.calibration import CalibrationEngine, assess_drift
from dynasty.config import get_preset, validate_settings
from dynasty.config_loader import ConfigBundle
from dynasty.errors import EngineError, InsufficientDataError
from dynasty.matchmaking import OBJECTIVES, SearchBudget, search_proposals
from dynasty.models import Asset, HistoricalOutcome, LeagueSettings
from dynasty.persistence import CalibrationStore
from dynasty.valuation import ValuationEngine, evaluate_trade


_ASSETS = TypeAdapter(List[Asset])
_OUTCOMES = TypeAdapter(List[HistoricalOutcome])


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dynasty trade valuation tools")
    parser.add_argument("--config", type=Path, default=None, help="Config bundle JSON (active/candidate)")
    parser.add_argument("--preset", default=None, help="League settings preset key (e.g., SF_PPR)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate = subparsers.add_parser("evaluate", help="Score both sides of a trade")
    evaluate.add_argument("trade", type=Path, help="JSON with team_a, team_b and optional settings")
    evaluate.add_argument("--output", type=Path, default=None, help="Write the evaluation as JSON")

    proposals = subparsers.add_parser("proposals", help="Search fair trades between two rosters")
    proposals.add_argument("rosters", type=Path, help="JSON with mine, theirs and optional settings")
    proposals.add_argument("--objective", choices=OBJECTIVES, default="balanced")
    proposals.add_argument("--band", type=float, default=None, help="Fairness band as a fraction (e.g., 0.08)")
    proposals.add_argument("--max-side", type=int, default=2, help="Largest subset per side (1-3)")
    proposals.add_argument("--limit", type=int, default=10, help="Number of proposals to print")
    proposals.add_argument("--max-evaluations", type=int, default=None, help="Stop after this many pairs")
    proposals.add_argument("--seconds", type=float, default=None, help="Stop after this many seconds")

    calibrate = subparsers.add_parser("calibrate", help="Refit weights against realized outcomes")
    calibrate.add_argument("outcomes", type=Path, help="JSON list of {asset, realized_value}")
    calibrate.add_argument("--db", type=Path, default=None, help="SQLite path for run history")
    calibrate.add_argument("--save", type=Path, default=None, help="Write the bundle with the new candidate")
    return parser.parse_args(argv)


def _load_bundle(path: Optional[Path]) -> ConfigBundle:
    if path is None:
        return ConfigBundle.default()
    return ConfigBundle.load(path)


def _resolve_settings(payload: dict, preset: Optional[str]) -> LeagueSettings:
    if preset:
        base = get_preset(preset).model_dump()
        base.update(payload.get("settings") or {})
        return validate_settings(base)
    return validate_settings(payload.get("settings"))


def _run_evaluate(args: argparse.Namespace, bundle: ConfigBundle) -> int:
    payload = json.loads(args.trade.read_text(encoding="utf-8"))
    settings = _resolve_settings(payload, args.preset)
    result = evaluate_trade(
        _ASSETS.validate_python(payload.get("team_a", [])),
        _ASSETS.validate_python(payload.get("team_b", [])),
        settings,
        bundle.active,
    )
    print(f"Settings: {settings.describe()}")
    for label, side, assets in (("A", result.team_a, result.team_a_assets), ("B", result.team_b, result.team_b_assets)):
        print(f"Team {label}: now={side.now_score:,.0f} future={side.future_score:,.0f} composite={side.composite:,.0f}")
        for scored in assets:
            print(f"  {scored.label:<32} {scored.composite:>10,.0f}")
    print(f"Verdict: {result.verdict} ({result.percent_difference:.1f}%)")
    print(result.explanation)
    if result.suggestion:
        print(f"Suggestion: {result.suggestion}")
    if args.output:
        report = {
            "verdict": result.verdict,
            "percent_difference": result.percent_difference,
            "explanation": result.explanation,
            "suggestion": result.suggestion,
            "team_a": [scored.model_dump(mode="json") for scored in result.team_a_assets],
            "team_b": [scored.model_dump(mode="json") for scored in result.team_b_assets],
        }
        args.output.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Wrote evaluation to {args.output}")
    return 0


def _run_proposals(args: argparse.Namespace, bundle: ConfigBundle) -> int:
    payload = json.loads(args.rosters.read_text(encoding="utf-8"))
    settings = _resolve_settings(payload, args.preset)
    engine = ValuationEngine(bundle.active)
    mine = engine.score_many(_ASSETS.validate_python(payload.get("mine", [])), settings)
    theirs = engine.score_many(_ASSETS.validate_python(payload.get("theirs", [])), settings)
    budget = SearchBudget()
    if args.max_evaluations is not None or args.seconds is not None:
        budget = SearchBudget(
            max_evaluations=args.max_evaluations if args.max_evaluations is not None else budget.max_evaluations,
            time_budget_seconds=args.seconds if args.seconds is not None else budget.time_budget_seconds,
        )
    search = search_proposals(
        mine,
        theirs,
        args.objective,
        fairness_band=args.band,
        max_side=args.max_side,
        budget=budget,
    )
    if not search.proposals:
        print(f"No fair proposals found ({search.evaluated} pairs evaluated)")
        return 0
    print(f"{len(search.proposals)} proposals from {search.evaluated} pairs" + (" (truncated)" if search.truncated else ""))
    for index, proposal in enumerate(search.proposals[: max(0, args.limit)], start=1):
        print(
            f"{index:>2}. give {', '.join(sorted(proposal.give))} for {', '.join(sorted(proposal.get))} "
            f"delta={proposal.fairness_delta * 100:.1f}% benefit={proposal.mutual_benefit:+.2f}"
        )
        print(f"    {proposal.rationale}")
    return 0


def _run_calibrate(args: argparse.Namespace, bundle: ConfigBundle) -> int:
    outcomes = _OUTCOMES.validate_python(json.loads(args.outcomes.read_text(encoding="utf-8")))
    settings = get_preset(args.preset) if args.preset else None
    engine = CalibrationEngine(CalibrationStore(args.db))
    try:
        run = engine.run_calibration(outcomes, bundle.active, settings=settings)
    except InsufficientDataError as exc:
        print(f"Calibration failed: {exc.message}")
        return 1
    metrics = run.metrics
    print(f"Run {run.run_id}: {run.status}")
    print(f"Overall rho {metrics.overall_rho:.4f} (baseline {metrics.baseline_rho if metrics.baseline_rho is not None else 'n/a'})")
    for position, rho in sorted(metrics.per_position_rho.items()):
        print(f"  {position}: {rho:.4f}")
    for alert in assess_drift(metrics):
        print(f"[{alert.severity}] {alert.message}")
    if run.candidate_config is not None:
        weights = run.candidate_config.weights
        print(
            f"Candidate v{run.candidate_config.version}: alpha={weights.alpha:.4f} "
            f"wM_now={weights.wM_now:.4f} wM_future={weights.wM_future:.4f}"
        )
        if args.save:
            ConfigBundle(active=bundle.active, candidate=run.candidate_config).save(args.save)
            print(f"Saved config bundle to {args.save}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    handlers = {
        "evaluate": _run_evaluate,
        "proposals": _run_proposals,
        "calibrate": _run_calibrate,
    }
    try:
        return handlers[args.command](args, _load_bundle(args.config))
    except (EngineError, KeyError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except pydantic.ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except (json.JSONDecodeError, OSError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
