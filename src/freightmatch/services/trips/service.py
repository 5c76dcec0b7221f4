"""Trip orchestration: route computation, updates and cancellation."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import replace
from typing import Optional, Sequence

from ...config import settings
from ...errors import Forbidden, InvalidGeometry, NotFound, TripUnavailable, ValidationFailed
from ...models.domain import LatLng, Place, TravelProfile, Trip, TripStatus
from ...persistence.store import MarketplaceStore
from ..geospatial import validate_point
from ..routing.base import RouteResult, RoutingProvider

logger = logging.getLogger(__name__)


def _validate_place(place: Place, role: str) -> Place:
    point = place.to_latlng()
    if point is None:
        raise InvalidGeometry(f"Trip {role} is missing coordinates.")
    validate_point(point)
    if place.radius_m is None or place.radius_m < 0:
        raise ValidationFailed(f"Trip {role} radius must be non-negative.")
    return place


def _validate_radius(corridor_radius_m: float) -> float:
    if corridor_radius_m is None or not math.isfinite(corridor_radius_m) or corridor_radius_m <= 0:
        raise ValidationFailed(f"Corridor radius must be positive, got {corridor_radius_m}.")
    return float(corridor_radius_m)


def _compute_route(provider: RoutingProvider, origin: Place, destination: Place, profile: TravelProfile) -> RouteResult:
    waypoints = [origin.to_latlng(), destination.to_latlng()]
    result = provider.route(waypoints, profile)
    logger.info(
        f"Route computed ({profile.value}): {len(result.polyline)} points, "
        f"{result.distance_m} m, {result.duration_s} s"
    )
    return result


def _load_owned_trip(store: MarketplaceStore, trip_id: str, acting_driver_id: str) -> Trip:
    trip = store.get_trip(trip_id)
    if trip is None:
        raise NotFound(f"Trip {trip_id} not found.")
    if trip.driver_id != acting_driver_id:
        raise Forbidden(f"Driver {acting_driver_id} does not own trip {trip_id}.")
    return trip


def create_trip(
    driver_id: str,
    origin: Place,
    destination: Place,
    corridor_radius_m: float,
    profile: TravelProfile = TravelProfile.CAR,
    *,
    store: MarketplaceStore,
    provider: RoutingProvider,
) -> Trip:
    """Compute the route and persist a new OPEN trip.

    A routing failure raises RouteComputationFailed and nothing is stored.
    """
    _validate_place(origin, "origin")
    _validate_place(destination, "destination")
    profile = TravelProfile(profile)
    radius = _validate_radius(corridor_radius_m)

    route = _compute_route(provider, origin, destination, profile)
    trip = Trip(
        id=str(uuid.uuid4()),
        driver_id=driver_id,
        origin=origin,
        destination=destination,
        corridor_radius_m=radius,
        profile=profile,
        route=list(route.polyline),
        route_distance_m=route.distance_m,
        route_duration_s=route.duration_s,
    )
    store.save_trip(trip)
    logger.info(f"Trip {trip.id} created for driver {driver_id}")
    return trip


def update_trip(
    trip_id: str,
    acting_driver_id: str,
    *,
    origin: Optional[Place] = None,
    destination: Optional[Place] = None,
    corridor_radius_m: Optional[float] = None,
    profile: Optional[TravelProfile] = None,
    store: MarketplaceStore,
    provider: RoutingProvider,
) -> Trip:
    """Apply changes to an OPEN trip.

    The cached route is recomputed when origin, destination or profile
    change. If that fails the trip is left untouched.
    """
    trip = _load_owned_trip(store, trip_id, acting_driver_id)
    if trip.status is not TripStatus.OPEN:
        raise TripUnavailable(f"Trip {trip_id} is {trip.status.value}.")

    updated = replace(trip)
    if origin is not None:
        updated.origin = _validate_place(origin, "origin")
    if destination is not None:
        updated.destination = _validate_place(destination, "destination")
    if profile is not None:
        updated.profile = TravelProfile(profile)
    if corridor_radius_m is not None:
        updated.corridor_radius_m = _validate_radius(corridor_radius_m)

    geometry_changed = (
        updated.origin != trip.origin
        or updated.destination != trip.destination
        or updated.profile is not trip.profile
    )
    if geometry_changed or not trip.has_route:
        route = _compute_route(provider, updated.origin, updated.destination, updated.profile)
        updated.route = list(route.polyline)
        updated.route_distance_m = route.distance_m
        updated.route_duration_s = route.duration_s

    store.save_trip(updated)
    logger.info(f"Trip {trip_id} updated (route recomputed: {geometry_changed})")
    return updated


def refresh_trip_route(trip_id: str, acting_driver_id: str, *, store: MarketplaceStore, provider: RoutingProvider) -> Trip:
    """Recompute the route of a trip, e.g. after a RouteNotReady error."""

    trip = _load_owned_trip(store, trip_id, acting_driver_id)
    if trip.status is not TripStatus.OPEN:
        raise TripUnavailable(f"Trip {trip_id} is {trip.status.value}.")
    route = _compute_route(provider, trip.origin, trip.destination, trip.profile)
    trip.route = list(route.polyline)
    trip.route_distance_m = route.distance_m
    trip.route_duration_s = route.duration_s
    store.save_trip(trip)
    return trip


def cancel_trip(trip_id: str, acting_driver_id: str, *, store: MarketplaceStore) -> Trip:
    trip = _load_owned_trip(store, trip_id, acting_driver_id)
    if trip.status is TripStatus.CANCELLED:
        raise TripUnavailable(f"Trip {trip_id} is already cancelled.")
    trip.status = TripStatus.CANCELLED
    store.save_trip(trip)
    logger.info(f"Trip {trip_id} cancelled by driver {acting_driver_id}")
    return trip


def get_trip(trip_id: str, *, store: MarketplaceStore) -> Trip:
    trip = store.get_trip(trip_id)
    if trip is None:
        raise NotFound(f"Trip {trip_id} not found.")
    return trip


def preview_route(
    coordinates: Sequence[LatLng],
    profile: TravelProfile = TravelProfile.CAR,
    *,
    provider: RoutingProvider,
) -> RouteResult:
    """Compute a route for display without creating a trip."""

    if len(coordinates) < 2:
        raise ValidationFailed("At least two coordinates are required for a route preview.")
    for point in coordinates:
        validate_point(point)
    return provider.route(list(coordinates), TravelProfile(profile))


def list_driver_trips(
    driver_id: str,
    *,
    status: Optional[TripStatus] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    store: MarketplaceStore,
) -> list[Trip]:
    """The driver's own trips, newest first, optionally filtered by status and label text."""

    limit = settings.default_list_limit if limit is None else limit
    if limit < 1:
        raise ValidationFailed(f"limit must be at least 1, got {limit}.")
    return store.list_trips(
        driver_id=driver_id,
        status=TripStatus(status) if status is not None else None,
        search=search,
        limit=limit,
    )
