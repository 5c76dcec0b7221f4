"""Route-corridor matching engine."""

from .corridor import Corridor, is_within_corridor
from .candidates import find_candidates, prefilter_freights
from .ranker import rank_candidates
from .scorer import ScoringResult, SkippedCandidate, proximity_score, score_candidate, score_candidates
from .service import MatchResult, compute_matches

__all__ = [
    "Corridor",
    "is_within_corridor",
    "find_candidates",
    "prefilter_freights",
    "rank_candidates",
    "ScoringResult",
    "SkippedCandidate",
    "proximity_score",
    "score_candidate",
    "score_candidates",
    "MatchResult",
    "compute_matches",
]
