"""Refit scoring weights against realized outcomes."""

from __future__ import annotations

import logging
import math
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple
from uuid import uuid4

import numpy as np
from scipy import stats

from dynasty.config import env
from dynasty.errors import ComputationError, ConflictError, InsufficientDataError, NotFoundError, ValidationError
from dynasty.models import (
    AppConfig,
    CalibrationMetrics,
    CalibrationRun,
    HistoricalOutcome,
    LeagueSettings,
    ModelWeights,
)
from dynasty.valuation import ValuationEngine


logger = logging.getLogger(__name__)

INITIAL_STEP = 0.1
MIN_STEP = 0.0125
MAX_ITERATIONS = 500
WEIGHT_BOUNDS = (0.0, 1.0)
MIN_POSITION_SAMPLES = 3
RANK_SHIFT_WINDOW = 50
SIGNIFICANT_SHIFT = 10
OVERALL_KEY = "OVERALL"

Parameters = Tuple[float, float, float]


class RunRegistry(Protocol):
    """Holds calibration runs and guards the single-running-run invariant."""

    def begin(self, run: CalibrationRun) -> CalibrationRun:
        """Store ``run`` as running or raise ConflictError if another is running."""

    def finish(self, run: CalibrationRun) -> CalibrationRun:
        """Record the terminal state of a running run."""

    def get(self, run_id: str) -> Optional[CalibrationRun]: ...

    def list_runs(self, limit: int = 20) -> List[CalibrationRun]: ...


class InMemoryRunRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._runs: Dict[str, CalibrationRun] = {}

    def begin(self, run: CalibrationRun) -> CalibrationRun:
        with self._lock:
            for existing in self._runs.values():
                if existing.status == "running":
                    raise ConflictError(f"Calibration run {existing.run_id} is already running")
            running = run.model_copy(update={"status": "running"})
            self._runs[run.run_id] = running
        return running

    def finish(self, run: CalibrationRun) -> CalibrationRun:
        if not run.is_terminal:
            raise ValidationError("status", f"expected a terminal status, got {run.status!r}")
        with self._lock:
            current = self._runs.get(run.run_id)
            if current is None:
                raise NotFoundError(f"Calibration run {run.run_id} not found")
            if current.is_terminal:
                raise ConflictError(f"Calibration run {run.run_id} already {current.status}")
            self._runs[run.run_id] = run
        return run

    def get(self, run_id: str) -> Optional[CalibrationRun]:
        with self._lock:
            return self._runs.get(run_id)

    def list_runs(self, limit: int = 20) -> List[CalibrationRun]:
        with self._lock:
            runs = sorted(self._runs.values(), key=lambda run: run.started_at, reverse=True)
        return runs[:limit]


def spearman_rho(predicted: Sequence[float], actual: Sequence[float]) -> Optional[float]:
    """Spearman rank correlation, or ``None`` when it is undefined."""

    if len(predicted) < 2:
        return None
    rho, _ = stats.spearmanr(predicted, actual)
    rho = float(rho)
    if math.isnan(rho):
        return None
    return rho


def _ranks(values: np.ndarray) -> np.ndarray:
    order = np.argsort(-values, kind="stable")
    ranks = np.empty(len(values), dtype=int)
    ranks[order] = np.arange(1, len(values) + 1)
    return ranks


def count_rank_shifts(before: np.ndarray, after: np.ndarray) -> int:
    """Count assets in the top window of ``before`` that move at least SIGNIFICANT_SHIFT ranks."""

    before_ranks = _ranks(before)
    after_ranks = _ranks(after)
    window = before_ranks <= RANK_SHIFT_WINDOW
    shifts = np.abs(before_ranks - after_ranks)[window]
    return int(np.count_nonzero(shifts >= SIGNIFICANT_SHIFT))


class _ComponentMatrix:
    """Precomputed weight-free score components for every outcome."""

    def __init__(self, engine: ValuationEngine, outcomes: Sequence[HistoricalOutcome], settings: LeagueSettings):
        components = [engine.score_components(outcome.asset, settings) for outcome in outcomes]
        self.now_market = np.array([c.now_market for c in components], dtype=float)
        self.now_projection = np.array([c.now_projection for c in components], dtype=float)
        self.future_market = np.array([c.future_market for c in components], dtype=float)
        self.future_projection = np.array([c.future_projection for c in components], dtype=float)
        self.positions = np.array([c.position for c in components])
        self.realized = np.array([outcome.realized_value for outcome in outcomes], dtype=float)

    def composite(self, params: Parameters) -> np.ndarray:
        alpha, wm_now, wm_future = params
        now = wm_now * self.now_market + (1.0 - wm_now) * self.now_projection
        future = wm_future * self.future_market + (1.0 - wm_future) * self.future_projection
        return np.maximum(0.0, alpha * now + (1.0 - alpha) * future)

    def rho(self, params: Parameters) -> Optional[float]:
        return spearman_rho(self.composite(params), self.realized)


def _free_parameters(weights: ModelWeights) -> Parameters:
    return (weights.alpha, weights.wM_now, weights.wM_future)


def coordinate_search(
    objective: Callable[[Parameters], Optional[float]],
    start: Parameters,
    *,
    initial_step: float = INITIAL_STEP,
    min_step: float = MIN_STEP,
    max_iterations: int = MAX_ITERATIONS,
) -> Tuple[Parameters, Optional[float], int]:
    """Maximise ``objective`` by axis-aligned steps that halve on stagnation.

    Only strict improvements are accepted and every coordinate stays inside
    WEIGHT_BOUNDS. Returns the best parameters, their score and the number of
    objective evaluations spent.
    """

    lower, upper = WEIGHT_BOUNDS
    params = start
    best = objective(params)
    evaluations = 1
    step = initial_step
    while step >= min_step - 1e-12 and evaluations < max_iterations:
        improved = False
        for axis in range(len(params)):
            for direction in (1.0, -1.0):
                value = min(upper, max(lower, params[axis] + direction * step))
                value = round(value, 6)
                if value == params[axis]:
                    continue
                candidate = params[:axis] + (value,) + params[axis + 1 :]
                score = objective(candidate)
                evaluations += 1
                if score is not None and (best is None or score > best):
                    params, best = candidate, score
                    improved = True
                    break
                if evaluations >= max_iterations:
                    break
            if evaluations >= max_iterations:
                break
        if not improved:
            step /= 2.0
    return params, best, evaluations


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CalibrationEngine:
    """Run calibration cycles against a registry of runs."""

    def __init__(
        self,
        registry: Optional[RunRegistry] = None,
        *,
        min_samples: Optional[int] = None,
        initial_step: float = INITIAL_STEP,
        min_step: float = MIN_STEP,
        max_iterations: int = MAX_ITERATIONS,
    ):
        self.registry = registry if registry is not None else InMemoryRunRegistry()
        self.min_samples = min_samples if min_samples is not None else env.min_calibration_samples()
        self.initial_step = initial_step
        self.min_step = min_step
        self.max_iterations = max_iterations

    def run_calibration(
        self,
        outcomes: Sequence[HistoricalOutcome],
        active_config: AppConfig,
        *,
        settings: Optional[LeagueSettings] = None,
    ) -> CalibrationRun:
        run = CalibrationRun(run_id=f"cal_{uuid4().hex[:12]}", started_at=_now())
        running = self.registry.begin(run)
        sample_size = len(outcomes)
        logger.info("Calibration run %s started with %d outcomes", running.run_id, sample_size)

        if sample_size < self.min_samples:
            message = f"Need at least {self.min_samples} historical outcomes, got {sample_size}"
            failed = self.registry.finish(
                running.model_copy(
                    update={
                        "status": "failed",
                        "error": message,
                        "completed_at": _now(),
                        "metrics": CalibrationMetrics(sample_size=sample_size),
                    }
                )
            )
            logger.warning("Calibration run %s failed: %s", failed.run_id, message)
            raise InsufficientDataError(message, samples=sample_size, minimum=self.min_samples, run=failed)

        start = time.perf_counter()
        try:
            metrics, candidate = self._fit(outcomes, active_config, settings or LeagueSettings())
        except Exception as exc:
            failed = self.registry.finish(
                running.model_copy(
                    update={
                        "status": "failed",
                        "error": str(exc),
                        "completed_at": _now(),
                        "metrics": CalibrationMetrics(sample_size=sample_size),
                    }
                )
            )
            logger.exception("Calibration run %s failed", failed.run_id)
            raise ComputationError(f"Calibration failed: {exc}", run=failed) from exc

        completed = self.registry.finish(
            running.model_copy(
                update={
                    "status": "completed",
                    "metrics": metrics,
                    "completed_at": _now(),
                    "candidate_config": candidate,
                }
            )
        )
        logger.info(
            "Calibration run %s completed in %.2fs: rho %.4f (baseline %s)",
            completed.run_id,
            time.perf_counter() - start,
            metrics.overall_rho,
            "n/a" if metrics.baseline_rho is None else f"{metrics.baseline_rho:.4f}",
        )
        return completed

    def _fit(
        self,
        outcomes: Sequence[HistoricalOutcome],
        active_config: AppConfig,
        settings: LeagueSettings,
    ) -> Tuple[CalibrationMetrics, AppConfig]:
        matrix = _ComponentMatrix(ValuationEngine(active_config), outcomes, settings)
        start = _free_parameters(active_config.weights)
        baseline_rho = matrix.rho(start)

        params, best_rho, evaluations = coordinate_search(
            matrix.rho,
            start,
            initial_step=self.initial_step,
            min_step=self.min_step,
            max_iterations=self.max_iterations,
        )
        if best_rho is None:
            raise ComputationError("Rank correlation is undefined for these outcomes")
        logger.debug("Coordinate search spent %d evaluations; parameters %s", evaluations, params)

        weights = ModelWeights.from_free_parameters(*params)
        before = matrix.composite(start)
        after = matrix.composite(params)

        per_position: Dict[str, float] = {}
        shifts: Dict[str, int] = {OVERALL_KEY: count_rank_shifts(before, after)}
        for position in sorted(set(matrix.positions.tolist())):
            mask = matrix.positions == position
            if int(mask.sum()) < MIN_POSITION_SAMPLES:
                continue
            rho = spearman_rho(after[mask], matrix.realized[mask])
            if rho is not None:
                per_position[position] = rho
            shifts[position] = count_rank_shifts(before[mask], after[mask])

        metrics = CalibrationMetrics(
            overall_rho=best_rho,
            per_position_rho=per_position,
            baseline_rho=baseline_rho,
            sample_size=len(outcomes),
            significant_rank_shifts=shifts,
        )
        candidate = active_config.model_copy(
            update={
                "weights": weights,
                "status": "candidate",
                "version": active_config.version + 1,
                "rollout_percentage": 0.0,
            }
        )
        return metrics, candidate


def run_calibration(
    outcomes: Sequence[HistoricalOutcome],
    active_config: AppConfig,
    *,
    registry: Optional[RunRegistry] = None,
    settings: Optional[LeagueSettings] = None,
) -> CalibrationRun:
    return CalibrationEngine(registry).run_calibration(outcomes, active_config, settings=settings)
