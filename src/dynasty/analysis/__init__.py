"""Roster analysis and trade impact relative to a team's timeline."""

from .roster import (
    CORE_POSITIONS,
    DepthCoverage,
    ImpactReport,
    RosterAnalysis,
    RosterFlags,
    StartingLineup,
    TeamBenchmark,
    analyze_roster,
    analyze_trade_impact,
    apply_trade,
    build_starting_lineup,
    depth_coverage,
    fit_label,
    replacement_baseline,
    roster_flags,
    team_benchmark,
    timeline_fit_score,
)

__all__ = [
    "CORE_POSITIONS",
    "DepthCoverage",
    "ImpactReport",
    "RosterAnalysis",
    "RosterFlags",
    "StartingLineup",
    "TeamBenchmark",
    "analyze_roster",
    "analyze_trade_impact",
    "apply_trade",
    "build_starting_lineup",
    "depth_coverage",
    "fit_label",
    "replacement_baseline",
    "roster_flags",
    "team_benchmark",
    "timeline_fit_score",
]
