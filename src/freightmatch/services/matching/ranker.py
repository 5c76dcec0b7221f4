"""Match ranker: deterministic ordering and truncation of scored candidates."""

from __future__ import annotations

from typing import Iterable, Optional

from ...config import settings
from ...errors import ValidationFailed
from ...models.domain import MatchCandidate


def ranking_key(candidate: MatchCandidate) -> tuple[float, float, str]:
    return (-candidate.score, candidate.combined_dist_m, candidate.freight_id)


def rank_candidates(candidates: Iterable[MatchCandidate], limit: Optional[int] = None) -> list[MatchCandidate]:
    """Sort by score (desc), combined distance (asc), freight id (asc); keep ``limit``."""

    limit = settings.default_match_limit if limit is None else limit
    if limit < 1:
        raise ValidationFailed(f"Match limit must be at least 1, got {limit}.")
    return sorted(candidates, key=ranking_key)[:limit]
