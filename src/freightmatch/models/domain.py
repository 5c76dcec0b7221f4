"""Domain models for freights, trips and match requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FreightStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class TripStatus(str, Enum):
    OPEN = "OPEN"
    CANCELLED = "CANCELLED"


class MatchRequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not MatchRequestStatus.PENDING


class MatchDecision(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class TravelProfile(str, Enum):
    CAR = "driving-car"
    HGV = "driving-hgv"


@dataclass(frozen=True, slots=True)
class LatLng:
    lat: float
    lng: float


@dataclass(slots=True)
class Place:
    """A labelled point; ``radius_m`` is the optional collection radius."""

    label: str
    lat: Optional[float]
    lng: Optional[float]
    radius_m: float = 0.0

    def to_latlng(self) -> Optional[LatLng]:
        if self.lat is None or self.lng is None:
            return None
        return LatLng(self.lat, self.lng)


@dataclass(slots=True)
class Freight:
    """Represents a shipment offer posted by a shipper."""

    id: str
    shipper_id: str
    pickup: Place
    dropoff: Place
    notes: Optional[str] = None
    status: FreightStatus = FreightStatus.OPEN
    distance_m: Optional[int] = None
    duration_s: Optional[int] = None
    price_total_cents: Optional[int] = None
    driver_payout_cents: Optional[int] = None
    currency: str = "BRL"
    created_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Trip:
    """Represents a driver's planned route and its tolerance corridor."""

    id: str
    driver_id: str
    origin: Place
    destination: Place
    corridor_radius_m: float
    profile: TravelProfile = TravelProfile.CAR
    route: List[LatLng] = field(default_factory=list)
    route_distance_m: Optional[int] = None
    route_duration_s: Optional[int] = None
    status: TripStatus = TripStatus.OPEN
    created_at: datetime = field(default_factory=utcnow)

    @property
    def has_route(self) -> bool:
        return len(self.route) >= 2


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    freight_id: str
    trip_id: str
    pickup_dist_m: float
    dropoff_dist_m: float
    pickup_pos: float
    dropoff_pos: float
    score: float

    @property
    def combined_dist_m(self) -> float:
        return self.pickup_dist_m + self.dropoff_dist_m


@dataclass(slots=True)
class MatchRequest:
    """Workflow record tracking a driver's interest in a (freight, trip) pair."""

    id: str
    freight_id: str
    trip_id: str
    driver_id: str
    shipper_id: str
    status: MatchRequestStatus = MatchRequestStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Contact:
    """How a driver or shipper can be reached once a deal is agreed."""

    user_id: str
    name: Optional[str] = None
    phone: Optional[str] = None


@dataclass(slots=True)
class MatchRequestDetail:
    """A match request with the labels of both sides and, once accepted, contacts."""

    request: MatchRequest
    pickup_label: str
    dropoff_label: str
    origin_label: str
    destination_label: str
    shipper_contact_name: Optional[str] = None
    shipper_contact_phone: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
