"""Storage contract for freights, trips and match requests, plus an in-memory store."""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import DuplicatePendingRequest, InvalidStateTransition, NotFound
from ..models.domain import (
    Contact,
    Freight,
    FreightStatus,
    MatchRequest,
    MatchRequestStatus,
    Place,
    Trip,
    TripStatus,
    utcnow,
)

logger = logging.getLogger(__name__)

# (min_lng, min_lat, max_lng, max_lat), same order as shapely's ``bounds``.
Bounds = tuple[float, float, float, float]


def place_in_bounds(place: Place, bounds: Bounds) -> bool:
    """True when the place lies inside ``bounds``; places without coordinates pass."""
    if place.lat is None or place.lng is None:
        return True
    min_lng, min_lat, max_lng, max_lat = bounds
    return min_lng <= place.lng <= max_lng and min_lat <= place.lat <= max_lat


def matches_search(search: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match of ``search`` against any of ``fields``."""
    term = (search or "").strip().casefold()
    if not term:
        return True
    return any(term in (value or "").casefold() for value in fields)


class MarketplaceStore(ABC):
    """Read/write collaborator for the matching engine and request lifecycle.

    Implementations carry no business rules beyond the two atomic operations
    the lifecycle depends on: ``insert_match_request`` must refuse a second
    PENDING request for the same (freight, trip) pair, and
    ``transition_match_request`` must only apply when the stored status still
    equals ``expected``.
    """

    @abstractmethod
    def get_freight(self, freight_id: str) -> Optional[Freight]:
        raise NotImplementedError

    @abstractmethod
    def save_freight(self, freight: Freight) -> Freight:
        raise NotImplementedError

    @abstractmethod
    def list_open_freights(self, *, bounds: Optional[Bounds] = None, limit: int = 500) -> list[Freight]:
        raise NotImplementedError

    @abstractmethod
    def list_freights(
        self,
        *,
        shipper_id: Optional[str] = None,
        status: Optional[FreightStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Freight]:
        """Freights newest first; ``search`` matches labels and notes case-insensitively."""
        raise NotImplementedError

    @abstractmethod
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        raise NotImplementedError

    @abstractmethod
    def save_trip(self, trip: Trip) -> Trip:
        raise NotImplementedError

    @abstractmethod
    def list_trips(
        self,
        *,
        driver_id: Optional[str] = None,
        status: Optional[TripStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Trip]:
        """Trips newest first; ``search`` matches origin and destination labels."""
        raise NotImplementedError

    @abstractmethod
    def get_contact(self, user_id: str) -> Optional[Contact]:
        raise NotImplementedError

    @abstractmethod
    def save_contact(self, contact: Contact) -> Contact:
        raise NotImplementedError

    @abstractmethod
    def get_match_request(self, request_id: str) -> Optional[MatchRequest]:
        raise NotImplementedError

    @abstractmethod
    def insert_match_request(self, request: MatchRequest) -> MatchRequest:
        raise NotImplementedError

    @abstractmethod
    def transition_match_request(
        self,
        request_id: str,
        *,
        expected: MatchRequestStatus,
        new_status: MatchRequestStatus,
    ) -> MatchRequest:
        raise NotImplementedError

    @abstractmethod
    def list_match_requests(
        self,
        *,
        trip_id: Optional[str] = None,
        shipper_id: Optional[str] = None,
        status: Optional[MatchRequestStatus] = None,
    ) -> list[MatchRequest]:
        raise NotImplementedError


class InMemoryStore(MarketplaceStore):
    """Thread-safe store used for local development and tests.

    Every read returns a copy so callers cannot mutate stored rows in place.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._freights: dict[str, Freight] = {}
        self._trips: dict[str, Trip] = {}
        self._requests: dict[str, MatchRequest] = {}
        self._contacts: dict[str, Contact] = {}

    def get_freight(self, freight_id: str) -> Optional[Freight]:
        with self._lock:
            freight = self._freights.get(freight_id)
            return copy.deepcopy(freight) if freight else None

    def save_freight(self, freight: Freight) -> Freight:
        with self._lock:
            self._freights[freight.id] = copy.deepcopy(freight)
        return freight

    def list_open_freights(self, *, bounds: Optional[Bounds] = None, limit: int = 500) -> list[Freight]:
        with self._lock:
            rows = [
                freight
                for freight in self._freights.values()
                if freight.status is FreightStatus.OPEN
                and (
                    bounds is None
                    or (place_in_bounds(freight.pickup, bounds) and place_in_bounds(freight.dropoff, bounds))
                )
            ]
            rows.sort(key=lambda freight: freight.id)
            rows.sort(key=lambda freight: freight.created_at, reverse=True)
            return [copy.deepcopy(freight) for freight in rows[:limit]]

    def list_freights(
        self,
        *,
        shipper_id: Optional[str] = None,
        status: Optional[FreightStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Freight]:
        with self._lock:
            rows = [
                freight
                for freight in self._freights.values()
                if (shipper_id is None or freight.shipper_id == shipper_id)
                and (status is None or freight.status is status)
                and matches_search(search, freight.pickup.label, freight.dropoff.label, freight.notes)
            ]
            rows.sort(key=lambda freight: freight.created_at, reverse=True)
            return [copy.deepcopy(freight) for freight in rows[:limit]]

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        with self._lock:
            trip = self._trips.get(trip_id)
            return copy.deepcopy(trip) if trip else None

    def save_trip(self, trip: Trip) -> Trip:
        with self._lock:
            self._trips[trip.id] = copy.deepcopy(trip)
        return trip

    def list_trips(
        self,
        *,
        driver_id: Optional[str] = None,
        status: Optional[TripStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Trip]:
        with self._lock:
            rows = [
                trip
                for trip in self._trips.values()
                if (driver_id is None or trip.driver_id == driver_id)
                and (status is None or trip.status is status)
                and matches_search(search, trip.origin.label, trip.destination.label)
            ]
            rows.sort(key=lambda trip: trip.created_at, reverse=True)
            return [copy.deepcopy(trip) for trip in rows[:limit]]

    def get_contact(self, user_id: str) -> Optional[Contact]:
        with self._lock:
            contact = self._contacts.get(user_id)
            return copy.deepcopy(contact) if contact else None

    def save_contact(self, contact: Contact) -> Contact:
        with self._lock:
            self._contacts[contact.user_id] = copy.deepcopy(contact)
        return contact

    def get_match_request(self, request_id: str) -> Optional[MatchRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            return copy.deepcopy(request) if request else None

    def insert_match_request(self, request: MatchRequest) -> MatchRequest:
        with self._lock:
            for existing in self._requests.values():
                if (
                    existing.freight_id == request.freight_id
                    and existing.trip_id == request.trip_id
                    and existing.status is MatchRequestStatus.PENDING
                ):
                    raise DuplicatePendingRequest(
                        f"A pending request already exists for freight {request.freight_id} "
                        f"and trip {request.trip_id} ({existing.id})."
                    )
            if request.id in self._requests:
                raise DuplicatePendingRequest(f"Match request {request.id} already exists.")
            self._requests[request.id] = copy.deepcopy(request)
        return request

    def transition_match_request(
        self,
        request_id: str,
        *,
        expected: MatchRequestStatus,
        new_status: MatchRequestStatus,
    ) -> MatchRequest:
        with self._lock:
            request = self._requests.get(request_id)
            if request is None:
                raise NotFound(f"Match request {request_id} not found.")
            if request.status is not expected:
                raise InvalidStateTransition(
                    f"Match request {request_id} is {request.status.value}, expected {expected.value}."
                )
            request.status = new_status
            request.updated_at = utcnow()
            return copy.deepcopy(request)

    def list_match_requests(
        self,
        *,
        trip_id: Optional[str] = None,
        shipper_id: Optional[str] = None,
        status: Optional[MatchRequestStatus] = None,
    ) -> list[MatchRequest]:
        with self._lock:
            rows = [
                request
                for request in self._requests.values()
                if (trip_id is None or request.trip_id == trip_id)
                and (shipper_id is None or request.shipper_id == shipper_id)
                and (status is None or request.status is status)
            ]
            rows.sort(key=lambda request: request.created_at, reverse=True)
            return [copy.deepcopy(request) for request in rows]
