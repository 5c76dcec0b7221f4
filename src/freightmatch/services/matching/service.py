"""Matching orchestration: filter, score and rank freights for a trip."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ...errors import NotFound, TripUnavailable
from ...models.domain import MatchCandidate, TripStatus
from ...persistence.store import MarketplaceStore
from .candidates import corridor_for_trip, find_candidates
from .ranker import rank_candidates
from .scorer import SkippedCandidate, score_candidates

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchResult:
    trip_id: str
    matches: List[MatchCandidate]
    skipped: List[SkippedCandidate] = field(default_factory=list)
    candidate_count: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def compute_matches(
    trip_id: str,
    limit: Optional[int] = None,
    *,
    store: MarketplaceStore,
    cap: Optional[int] = None,
) -> MatchResult:
    """Compute the ranked matches for ``trip_id`` from the store's current rows.

    Nothing is cached or written; calling twice against the same rows yields
    the same ordered list.
    """
    started = time.perf_counter()
    trip = store.get_trip(trip_id)
    if trip is None:
        raise NotFound(f"Trip {trip_id} not found.")
    if trip.status is not TripStatus.OPEN:
        raise TripUnavailable(f"Trip {trip_id} is {trip.status.value}.")

    corridor = corridor_for_trip(trip)
    candidates = find_candidates(trip, store, cap=cap, corridor=corridor)
    scored = score_candidates(candidates, trip.id, corridor)
    ranked = rank_candidates(scored.accepted, limit)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"Trip {trip_id}: {len(candidates)} candidates, {len(scored.accepted)} accepted, "
        f"{scored.skipped_count} skipped, returning {len(ranked)} in {elapsed_ms:.1f}ms"
    )
    return MatchResult(
        trip_id=trip.id,
        matches=ranked,
        skipped=scored.skipped,
        candidate_count=len(candidates),
    )
