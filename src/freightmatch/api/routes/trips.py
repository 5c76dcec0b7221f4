"""Trip and matching endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...config import settings
from ...persistence.store import MarketplaceStore
from ...schemas.common import CoordinateModel
from ...schemas.matching import MatchesResponse, MatchModel, MatchRequestModel, SkippedModel
from ...schemas.trips import (
    RoutePreviewRequest,
    RoutePreviewResponse,
    TripActionRequest,
    TripCreateRequest,
    TripResponse,
    TripUpdateRequest,
)
from ...services.matching import compute_matches
from ...services.requests import list_requests_for_trip
from ...services.routing import RoutingProvider
from ...services.trips import service as trip_service
from ..deps import get_routing, get_store

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
def create_trip(
    payload: TripCreateRequest,
    store: MarketplaceStore = Depends(get_store),
    provider: RoutingProvider = Depends(get_routing),
) -> TripResponse:
    trip = trip_service.create_trip(
        payload.driver_id,
        payload.origin.to_domain(),
        payload.destination.to_domain(),
        payload.corridor_radius_m,
        payload.profile,
        store=store,
        provider=provider,
    )
    return TripResponse.from_domain(trip)


@router.post("/route-preview", response_model=RoutePreviewResponse, status_code=status.HTTP_200_OK)
def route_preview(
    payload: RoutePreviewRequest,
    provider: RoutingProvider = Depends(get_routing),
) -> RoutePreviewResponse:
    """Compute a route for display without creating a trip."""
    result = trip_service.preview_route(
        [coordinate.to_domain() for coordinate in payload.coordinates],
        payload.profile,
        provider=provider,
    )
    return RoutePreviewResponse(
        route=[CoordinateModel.from_domain(point) for point in result.polyline],
        distance_m=result.distance_m,
        duration_s=result.duration_s,
    )


@router.get("/{trip_id}", response_model=TripResponse, status_code=status.HTTP_200_OK)
def get_trip(trip_id: str, store: MarketplaceStore = Depends(get_store)) -> TripResponse:
    return TripResponse.from_domain(trip_service.get_trip(trip_id, store=store))


@router.patch("/{trip_id}", response_model=TripResponse, status_code=status.HTTP_200_OK)
def update_trip(
    trip_id: str,
    payload: TripUpdateRequest,
    store: MarketplaceStore = Depends(get_store),
    provider: RoutingProvider = Depends(get_routing),
) -> TripResponse:
    trip = trip_service.update_trip(
        trip_id,
        payload.driver_id,
        origin=payload.origin.to_domain() if payload.origin else None,
        destination=payload.destination.to_domain() if payload.destination else None,
        corridor_radius_m=payload.corridor_radius_m,
        profile=payload.profile,
        store=store,
        provider=provider,
    )
    return TripResponse.from_domain(trip)


@router.post("/{trip_id}/refresh-route", response_model=TripResponse, status_code=status.HTTP_200_OK)
def refresh_route(
    trip_id: str,
    payload: TripActionRequest,
    store: MarketplaceStore = Depends(get_store),
    provider: RoutingProvider = Depends(get_routing),
) -> TripResponse:
    trip = trip_service.refresh_trip_route(trip_id, payload.driver_id, store=store, provider=provider)
    return TripResponse.from_domain(trip)


@router.post("/{trip_id}/cancel", response_model=TripResponse, status_code=status.HTTP_200_OK)
def cancel_trip(
    trip_id: str,
    payload: TripActionRequest,
    store: MarketplaceStore = Depends(get_store),
) -> TripResponse:
    return TripResponse.from_domain(trip_service.cancel_trip(trip_id, payload.driver_id, store=store))


@router.get("/{trip_id}/matches", response_model=MatchesResponse, status_code=status.HTTP_200_OK)
def trip_matches(
    trip_id: str,
    limit: int | None = Query(default=None, ge=1, le=settings.max_match_limit),
    store: MarketplaceStore = Depends(get_store),
) -> MatchesResponse:
    """Ranked freights whose pickup and dropoff fall inside the trip's corridor."""
    result = compute_matches(trip_id, limit, store=store)
    return MatchesResponse(
        trip_id=result.trip_id,
        matches=[MatchModel.from_domain(candidate) for candidate in result.matches],
        skipped_count=result.skipped_count,
        skipped=[SkippedModel(freight_id=item.freight_id, reason=item.reason) for item in result.skipped],
    )


@router.get("/{trip_id}/match-requests", response_model=list[MatchRequestModel], status_code=status.HTTP_200_OK)
def trip_match_requests(trip_id: str, store: MarketplaceStore = Depends(get_store)) -> list[MatchRequestModel]:
    return [MatchRequestModel.from_domain(request) for request in list_requests_for_trip(trip_id, store=store)]
