"""Correlation and position-mix drift checks for calibration metrics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence

from scipy.spatial import distance

from dynasty.analysis import CORE_POSITIONS
from dynasty.models import CalibrationMetrics

from .engine import OVERALL_KEY, RANK_SHIFT_WINDOW


Severity = Literal["warning", "critical"]

RHO_WARNING = 0.80
RHO_CRITICAL = 0.75
DIVERGENCE_WARNING = 0.10
DIVERGENCE_CRITICAL = 0.15
MOVERS_WARNING = 0.15
MOVERS_CRITICAL = 0.25


@dataclass(frozen=True)
class DriftAlert:
    kind: Literal["correlation", "divergence", "movers"]
    severity: Severity
    metric: str
    value: float
    threshold: float
    message: str
    position: Optional[str] = None


def _rho_alert(metric: str, value: float, position: Optional[str], warning: float, critical: float) -> Optional[DriftAlert]:
    scope = f"{position} rank correlation" if position else "Overall rank correlation"
    if value < critical:
        return DriftAlert(
            kind="correlation",
            severity="critical",
            metric=metric,
            value=value,
            threshold=critical,
            message=f"{scope} {value:.3f} is below the critical threshold {critical:.2f}",
            position=position,
        )
    if value < warning:
        return DriftAlert(
            kind="correlation",
            severity="warning",
            metric=metric,
            value=value,
            threshold=warning,
            message=f"{scope} {value:.3f} is below the warning threshold {warning:.2f}",
            position=position,
        )
    return None


def position_mix_divergence(current: Sequence[str], previous: Sequence[str]) -> float:
    """Jensen-Shannon divergence (base 2) between two position distributions."""

    if not current or not previous:
        return 0.0
    now_counts = Counter(position.upper() for position in current)
    then_counts = Counter(position.upper() for position in previous)
    now = [now_counts.get(position, 0) / len(current) for position in CORE_POSITIONS]
    then = [then_counts.get(position, 0) / len(previous) for position in CORE_POSITIONS]
    if not any(now) or not any(then):
        return 0.0
    return float(distance.jensenshannon(now, then, base=2) ** 2)


def mover_share(metrics: CalibrationMetrics) -> Optional[float]:
    """Fraction of the top of the board whose rank moved significantly."""

    window = min(metrics.sample_size, RANK_SHIFT_WINDOW)
    if window <= 0 or OVERALL_KEY not in metrics.significant_rank_shifts:
        return None
    return metrics.significant_rank_shifts[OVERALL_KEY] / window


def assess_drift(
    metrics: CalibrationMetrics,
    *,
    warning: float = RHO_WARNING,
    critical: float = RHO_CRITICAL,
    divergence: Optional[float] = None,
) -> List[DriftAlert]:
    alerts: List[DriftAlert] = []
    if metrics.overall_rho is not None:
        alert = _rho_alert("overall_rho", metrics.overall_rho, None, warning, critical)
        if alert is not None:
            alerts.append(alert)
    for position in sorted(metrics.per_position_rho):
        alert = _rho_alert("position_rho", metrics.per_position_rho[position], position, warning, critical)
        if alert is not None:
            alerts.append(alert)
    if divergence is not None and divergence >= DIVERGENCE_WARNING:
        severity: Severity = "critical" if divergence >= DIVERGENCE_CRITICAL else "warning"
        threshold = DIVERGENCE_CRITICAL if severity == "critical" else DIVERGENCE_WARNING
        alerts.append(
            DriftAlert(
                kind="divergence",
                severity=severity,
                metric="js_divergence",
                value=divergence,
                threshold=threshold,
                message=f"Position mix divergence {divergence:.3f} exceeds {threshold:.2f}",
            )
        )
    share = mover_share(metrics)
    if share is not None and share > MOVERS_WARNING:
        severity = "critical" if share > MOVERS_CRITICAL else "warning"
        threshold = MOVERS_CRITICAL if severity == "critical" else MOVERS_WARNING
        moved = metrics.significant_rank_shifts[OVERALL_KEY]
        alerts.append(
            DriftAlert(
                kind="movers",
                severity=severity,
                metric="mover_share",
                value=share,
                threshold=threshold,
                message=f"{moved} top players moved significantly ({share * 100:.1f}%), above {threshold * 100:.0f}%",
            )
        )
    return alerts
