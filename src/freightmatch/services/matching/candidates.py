"""Candidate filter: cheap bounding-box narrowing before exact corridor geometry."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...config import settings
from ...errors import RouteNotReady
from ...models.domain import Freight, FreightStatus, Place, Trip
from ...persistence.store import MarketplaceStore
from .corridor import Corridor

logger = logging.getLogger(__name__)


def corridor_for_trip(trip: Trip) -> Corridor:
    if not trip.has_route:
        raise RouteNotReady(f"Trip {trip.id} has no computed route geometry.")
    return Corridor(trip.route, trip.corridor_radius_m)


def _may_fall_inside(place: Place, corridor: Corridor) -> bool:
    point = place.to_latlng() if place is not None else None
    return point is None or corridor.may_contain(point)


def prefilter_freights(freights: Iterable[Freight], corridor: Corridor) -> list[Freight]:
    """Keep OPEN freights whose pickup and dropoff fall inside the corridor envelope.

    Freights with missing coordinates are kept so the scorer can report them.
    """
    return [
        freight
        for freight in freights
        if freight.status is FreightStatus.OPEN
        and _may_fall_inside(freight.pickup, corridor)
        and _may_fall_inside(freight.dropoff, corridor)
    ]


def find_candidates(
    trip: Trip,
    store: MarketplaceStore,
    *,
    cap: Optional[int] = None,
    corridor: Optional[Corridor] = None,
) -> list[Freight]:
    """Return OPEN freights that may fall inside the trip's corridor."""

    corridor = corridor or corridor_for_trip(trip)
    limit = cap if cap is not None else settings.candidate_cap
    rows = store.list_open_freights(bounds=corridor.envelope.bounds, limit=limit)
    candidates = prefilter_freights(rows, corridor)
    logger.debug(f"Trip {trip.id}: {len(rows)} freights fetched, {len(candidates)} inside envelope")
    return candidates
