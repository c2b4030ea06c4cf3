"""Trade-partner ranking and proposal search."""

from .proposals import (
    DEFAULT_FAIRNESS_BANDS,
    OBJECTIVES,
    Objective,
    Proposal,
    ProposalSearch,
    SearchBudget,
    fairness_delta,
    generate_proposals,
    search_proposals,
)
from .service import (
    InMemoryLeagueRepository,
    LeagueRepository,
    MatchmakingService,
    RankedOpponent,
    compatibility,
    compute_matchmaking,
)

__all__ = [
    "DEFAULT_FAIRNESS_BANDS",
    "OBJECTIVES",
    "Objective",
    "Proposal",
    "ProposalSearch",
    "SearchBudget",
    "fairness_delta",
    "generate_proposals",
    "search_proposals",
    "InMemoryLeagueRepository",
    "LeagueRepository",
    "MatchmakingService",
    "RankedOpponent",
    "compatibility",
    "compute_matchmaking",
]
