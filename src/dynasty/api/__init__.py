"""REST API for the dynasty valuation engine."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query

from dynasty.analysis import analyze_roster, analyze_trade_impact, team_benchmark
from dynasty.api.schemas import (
    CalibrationRunRequest,
    CalibrationRunResponse,
    ConfigResponse,
    DepthResponse,
    DriftAlertResponse,
    ImpactResponse,
    LeagueCreatedResponse,
    ProposalResponse,
    RankedOpponentResponse,
    RecommendationResponse,
    RecommendationsRequest,
    RosterFlagsResponse,
    ScoredAssetResponse,
    ScoreRequest,
    ScoreResponse,
    TeamAnalyzeRequest,
    TeamAnalyzeResponse,
    TradeEvaluateRequest,
    TradeEvaluateResponse,
    TradeSideResponse,
)
from dynasty.calibration import CalibrationEngine, RunRegistry, assess_drift, position_mix_divergence
from dynasty.config import validate_settings
from dynasty.config_loader import ConfigBundle
from dynasty.errors import (
    ComputationError,
    ConflictError,
    EngineError,
    InsufficientDataError,
    NotFoundError,
    ValidationError,
)
from dynasty.matchmaking import InMemoryLeagueRepository, MatchmakingService
from dynasty.models import CalibrationRun, LeagueSnapshot, asset_position
from dynasty.persistence import CalibrationStore
from dynasty.recommend import generate_recommendations
from dynasty.valuation import SideTotals, ValuationEngine, evaluate_scored_trade


logger = logging.getLogger("uvicorn.error")

_ERROR_STATUS = (
    (InsufficientDataError, 422),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ComputationError, 500),
)


def _http_error(exc: EngineError) -> HTTPException:
    status = next((code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)), 500)
    detail: object = str(exc)
    run = getattr(exc, "run", None)
    if isinstance(run, CalibrationRun):
        detail = {"message": str(exc), "run_id": run.run_id, "status": run.status}
    return HTTPException(status_code=status, detail=detail)


def _side(totals: SideTotals, assets) -> TradeSideResponse:
    return TradeSideResponse(
        now_score=totals.now_score,
        future_score=totals.future_score,
        composite=totals.composite,
        assets=[ScoredAssetResponse.from_scored(item) for item in assets],
    )


def create_app(
    config_bundle: Optional[ConfigBundle] = None,
    registry: Optional[RunRegistry] = None,
) -> FastAPI:
    app = FastAPI(title="dynasty engine")
    app.state.config_bundle = config_bundle or ConfigBundle.default()
    app.state.leagues = InMemoryLeagueRepository()
    app.state.run_registry = registry if registry is not None else CalibrationStore()

    def active_config():
        return app.state.config_bundle.active

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/assets/score", response_model=ScoreResponse)
    async def score_assets(payload: ScoreRequest):
        config = active_config()
        try:
            settings = validate_settings(payload.settings)
            scored = ValuationEngine(config).score_many(payload.assets, settings)
        except EngineError as exc:
            raise _http_error(exc) from exc
        return ScoreResponse(
            settings_summary=settings.describe(),
            config_version=config.version,
            assets=[ScoredAssetResponse.from_scored(item) for item in scored],
        )

    @app.post("/trades/evaluate", response_model=TradeEvaluateResponse)
    async def evaluate(payload: TradeEvaluateRequest):
        try:
            settings = validate_settings(payload.settings)
            engine = ValuationEngine(active_config())
            result = evaluate_scored_trade(
                engine.score_many(payload.team_a, settings),
                engine.score_many(payload.team_b, settings),
            )
        except EngineError as exc:
            raise _http_error(exc) from exc
        return TradeEvaluateResponse(
            team_a=_side(result.team_a, result.team_a_assets),
            team_b=_side(result.team_b, result.team_b_assets),
            percent_difference=result.percent_difference,
            verdict=result.verdict,
            explanation=result.explanation,
            suggestion=result.suggestion,
            now_delta=result.now_delta,
            future_delta=result.future_delta,
        )

    @app.post("/team/analyze", response_model=TeamAnalyzeResponse)
    async def analyze_team(payload: TeamAnalyzeRequest):
        profile = payload.profile
        engine = ValuationEngine(active_config())
        try:
            roster = engine.score_many(payload.roster, profile.league_settings)
            by_id = {item.asset_id: item for item in roster}
            missing = [asset_id for asset_id in payload.outgoing if asset_id not in by_id]
            if missing:
                raise ValidationError("outgoing", f"assets not on the submitted roster: {', '.join(missing)}")
            impact = None
            if payload.outgoing or payload.incoming:
                report = analyze_trade_impact(
                    profile,
                    [by_id[asset_id] for asset_id in payload.outgoing],
                    engine.score_many(payload.incoming, profile.league_settings),
                    roster=roster,
                )
                impact = ImpactResponse(
                    delta_now=report.delta_now,
                    delta_future=report.delta_future,
                    delta_composite=report.delta_composite,
                    timeline_fit=report.timeline_fit,
                    fit_score=report.fit_score,
                    flags=list(report.flags),
                )
            analysis = analyze_roster(profile, roster)
            benchmark = team_benchmark(profile, roster)
        except EngineError as exc:
            raise _http_error(exc) from exc
        flags = analysis.flags
        return TeamAnalyzeResponse(
            team_id=profile.team_id,
            starters={slot: [item.asset_id for item in assets] for slot, assets in analysis.lineup.slots.items()},
            lineup_now=analysis.lineup.total_now,
            lineup_future=analysis.lineup.total_future,
            now_index=analysis.now_index,
            future_index=analysis.future_index,
            depth={
                position: DepthResponse(viable=data.viable, coverage=data.coverage)
                for position, data in analysis.depth.items()
            },
            flags=RosterFlagsResponse(
                qb_gap=flags.qb_gap,
                thin_depth=list(flags.thin_depth),
                critical_gaps=list(flags.critical_gaps),
                risk_flags=list(flags.risk_flags),
                age_skew=list(flags.age_skew),
            ),
            surplus=list(benchmark.surplus),
            needs=list(benchmark.needs),
            impact=impact,
        )

    @app.post("/team/recommendations", response_model=List[RecommendationResponse])
    async def recommendations(payload: RecommendationsRequest):
        try:
            if payload.settings is None and payload.profile is not None:
                settings = payload.profile.league_settings
            else:
                settings = validate_settings(payload.settings)
            engine = ValuationEngine(active_config())
            ranked = generate_recommendations(
                engine.score_many(payload.team_a, settings),
                engine.score_many(payload.team_b, settings),
                settings,
                payload.profile,
                limit=payload.limit,
                offer=(payload.give, payload.get) if payload.give or payload.get else None,
            )
        except EngineError as exc:
            raise _http_error(exc) from exc
        return [
            RecommendationResponse(
                action=item.action,
                asset=ScoredAssetResponse.from_scored(item.asset),
                fit_score=item.fit_score,
                priority=item.priority,
                reasoning=item.reasoning,
            )
            for item in ranked
        ]

    @app.post("/leagues", response_model=LeagueCreatedResponse, status_code=201)
    async def create_league(league: LeagueSnapshot):
        for team in league.teams:
            unknown = [asset_id for asset_id in team.asset_ids if asset_id not in league.assets]
            if unknown:
                raise HTTPException(
                    status_code=400,
                    detail=f"Team {team.team_id} references unknown assets: {', '.join(unknown)}",
                )
        app.state.leagues.save(league)
        logger.info("Stored league %s with %d teams", league.league_id, len(league.teams))
        return LeagueCreatedResponse(league_id=league.league_id, teams=len(league.teams), assets=len(league.assets))

    @app.get("/league/{league_id}/matchmaking", response_model=List[RankedOpponentResponse])
    async def matchmaking(league_id: str, team_id: str, objective: str = "balanced"):
        service = MatchmakingService(app.state.leagues, active_config())
        try:
            ranked = service.compute_matchmaking(team_id, league_id, objective)
        except EngineError as exc:
            raise _http_error(exc) from exc
        return [
            RankedOpponentResponse(
                opponent_id=item.opponent_id,
                display_name=item.display_name,
                user_handle=item.user_handle,
                compatibility_score=item.compatibility_score,
                give_positions=list(item.give_positions),
                get_positions=list(item.get_positions),
                timeline_note=item.timeline_note,
                surplus_complement=dict(item.surplus_complement),
                needs_complement=dict(item.needs_complement),
            )
            for item in ranked
        ]

    @app.get("/league/{league_id}/proposals", response_model=List[ProposalResponse])
    async def proposals(
        league_id: str,
        team_id: str,
        opponent_id: str,
        objective: str = "balanced",
        band: Optional[float] = Query(None, ge=0.0, le=1.0),
        limit: int = Query(3, ge=1, le=50),
    ):
        service = MatchmakingService(app.state.leagues, active_config())
        try:
            found = service.generate_proposals(
                team_id, opponent_id, league_id, objective, fairness_band=band, limit=limit
            )
        except EngineError as exc:
            raise _http_error(exc) from exc
        return [
            ProposalResponse(
                give=sorted(item.give),
                get=sorted(item.get),
                fairness_delta=item.fairness_delta,
                rationale=item.rationale,
                objective=item.objective,
                give_total=item.give_total,
                get_total=item.get_total,
                mutual_benefit=item.mutual_benefit,
            )
            for item in found
        ]

    @app.post("/admin/calibration/run", response_model=CalibrationRunResponse)
    def calibrate(payload: CalibrationRunRequest):
        bundle: ConfigBundle = app.state.config_bundle
        engine = CalibrationEngine(app.state.run_registry)
        try:
            settings = validate_settings(payload.settings)
            run = engine.run_calibration(payload.outcomes, bundle.active, settings=settings)
        except EngineError as exc:
            raise _http_error(exc) from exc
        divergence = None
        if payload.previous_positions:
            current = [asset_position(item.asset) for item in payload.outcomes]
            divergence = position_mix_divergence(current, payload.previous_positions)
        alerts = assess_drift(run.metrics, divergence=divergence)
        if run.candidate_config is not None:
            app.state.config_bundle = ConfigBundle(active=bundle.active, candidate=run.candidate_config)
        for alert in alerts:
            logger.warning("Calibration %s drift: %s", run.run_id, alert.message)
        return CalibrationRunResponse(
            run=run,
            alerts=[
                DriftAlertResponse(
                    kind=alert.kind,
                    severity=alert.severity,
                    metric=alert.metric,
                    value=alert.value,
                    threshold=alert.threshold,
                    message=alert.message,
                    position=alert.position,
                )
                for alert in alerts
            ],
        )

    @app.get("/admin/calibration", response_model=List[CalibrationRun])
    async def list_calibration_runs(limit: int = Query(20, ge=1, le=200)):
        return app.state.run_registry.list_runs(limit=limit)

    @app.get("/admin/calibration/{run_id}", response_model=CalibrationRun)
    async def get_calibration_run(run_id: str):
        run = app.state.run_registry.get(run_id)
        if run is None:
            raise HTTPException(status_code=404, detail="Calibration run not found")
        return run

    @app.get("/admin/config", response_model=ConfigResponse)
    async def get_config():
        bundle: ConfigBundle = app.state.config_bundle
        return ConfigResponse(active=bundle.active, candidate=bundle.candidate)

    return app


__all__ = ["create_app"]
