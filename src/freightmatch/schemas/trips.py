"""Trip request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..config import settings
from ..models.domain import TravelProfile, Trip, TripStatus
from .common import CoordinateModel, PlaceModel, PlaceOut


class TripCreateRequest(BaseModel):
    driver_id: str = Field(..., min_length=1)
    origin: PlaceModel
    destination: PlaceModel
    corridor_radius_m: float = Field(default_factory=lambda: settings.default_corridor_radius_m, gt=0)
    profile: TravelProfile = Field(default_factory=lambda: TravelProfile(settings.default_profile))


class TripUpdateRequest(BaseModel):
    driver_id: str = Field(..., min_length=1, description="Acting driver; must own the trip.")
    origin: Optional[PlaceModel] = None
    destination: Optional[PlaceModel] = None
    corridor_radius_m: Optional[float] = Field(default=None, gt=0)
    profile: Optional[TravelProfile] = None


class TripActionRequest(BaseModel):
    driver_id: str = Field(..., min_length=1)


class TripResponse(BaseModel):
    id: str
    driver_id: str
    origin: PlaceOut
    destination: PlaceOut
    corridor_radius_m: float
    profile: TravelProfile
    status: TripStatus
    route: List[CoordinateModel]
    route_distance_m: Optional[int] = None
    route_duration_s: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, trip: Trip) -> "TripResponse":
        return cls(
            id=trip.id,
            driver_id=trip.driver_id,
            origin=PlaceOut.from_domain(trip.origin),
            destination=PlaceOut.from_domain(trip.destination),
            corridor_radius_m=trip.corridor_radius_m,
            profile=trip.profile,
            status=trip.status,
            route=[CoordinateModel.from_domain(point) for point in trip.route],
            route_distance_m=trip.route_distance_m,
            route_duration_s=trip.route_duration_s,
            created_at=trip.created_at,
        )


class RoutePreviewRequest(BaseModel):
    coordinates: List[CoordinateModel] = Field(..., min_length=2)
    profile: TravelProfile = Field(default_factory=lambda: TravelProfile(settings.default_profile))


class RoutePreviewResponse(BaseModel):
    route: List[CoordinateModel]
    distance_m: Optional[int] = None
    duration_s: Optional[int] = None
