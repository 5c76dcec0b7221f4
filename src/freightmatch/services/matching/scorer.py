"""Match scorer: exact corridor inclusion, direction check and proximity score."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ...errors import InvalidGeometry, MatchingError
from ...models.domain import Freight, MatchCandidate, Place
from .corridor import Corridor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkippedCandidate:
    freight_id: str
    reason: str


@dataclass(slots=True)
class ScoringResult:
    accepted: List[MatchCandidate] = field(default_factory=list)
    skipped: List[SkippedCandidate] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def proximity_score(pickup_dist_m: float, dropoff_dist_m: float, radius_m: float) -> float:
    """Score in (0, 1]: 1.0 on the route, decreasing with combined distance.

    Distances are normalised by the corridor radius so tight and loose
    corridors produce comparable scores.
    """
    return 1.0 / (1.0 + (pickup_dist_m + dropoff_dist_m) / radius_m)


def _point(place: Place, role: str, freight_id: str):
    point = place.to_latlng() if place is not None else None
    if point is None:
        raise InvalidGeometry(f"Freight {freight_id} has no {role} coordinates.")
    return point


def score_candidate(freight: Freight, trip_id: str, corridor: Corridor) -> Optional[MatchCandidate]:
    """Score one freight against the corridor.

    Returns None when the freight falls outside the corridor or its pickup
    lies after its dropoff along the route. Raises InvalidGeometry for
    malformed coordinates.
    """
    pickup = corridor.project(_point(freight.pickup, "pickup", freight.id))
    if pickup.distance_m > corridor.radius_m:
        return None
    dropoff = corridor.project(_point(freight.dropoff, "dropoff", freight.id))
    if dropoff.distance_m > corridor.radius_m:
        return None
    # Co-located pickup and dropoff (equal positions) are valid.
    if pickup.fraction > dropoff.fraction:
        return None

    return MatchCandidate(
        freight_id=freight.id,
        trip_id=trip_id,
        pickup_dist_m=pickup.distance_m,
        dropoff_dist_m=dropoff.distance_m,
        pickup_pos=pickup.fraction,
        dropoff_pos=dropoff.fraction,
        score=proximity_score(pickup.distance_m, dropoff.distance_m, corridor.radius_m),
    )


def score_candidates(freights: Iterable[Freight], trip_id: str, corridor: Corridor) -> ScoringResult:
    """Score every freight, isolating per-freight failures as skipped items."""

    result = ScoringResult()
    for freight in freights:
        try:
            candidate = score_candidate(freight, trip_id, corridor)
        except MatchingError as exc:
            logger.warning(f"Skipping freight {freight.id} for trip {trip_id}: {exc.message}")
            result.skipped.append(SkippedCandidate(freight_id=freight.id, reason=exc.message))
            continue
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning(f"Skipping malformed freight {getattr(freight, 'id', '?')} for trip {trip_id}: {exc}")
            result.skipped.append(SkippedCandidate(freight_id=str(getattr(freight, "id", "")), reason=str(exc)))
            continue
        if candidate is not None:
            result.accepted.append(candidate)
    return result
