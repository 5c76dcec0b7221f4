"""Supabase (PostgREST) backed marketplace store.

Expected schema, managed outside this service:

- ``freight`` table with PostGIS ``pickup_geom``/``dropoff_geom`` points and a
  ``freight_ui`` view exposing ``pickup_lat``/``pickup_lng``/``dropoff_lat``/
  ``dropoff_lng``.
- ``trip`` table with a PostGIS ``route_geom`` line string and a ``trip_ui``
  view exposing origin/destination lat/lng and ``route_geojson``.
- ``profiles`` table with ``id``, ``full_name`` and ``phone`` used for contacts.
- ``match_request`` table with the partial unique index
  ``create unique index match_request_one_pending on match_request (freight_id, trip_id) where status = 'PENDING'``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from ..errors import DuplicatePendingRequest, InvalidStateTransition, NotFound
from ..models.domain import (
    Contact,
    Freight,
    FreightStatus,
    LatLng,
    MatchRequest,
    MatchRequestStatus,
    Place,
    TravelProfile,
    Trip,
    TripStatus,
)
from .store import Bounds, MarketplaceStore

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def point_ewkt(place: Place) -> str | None:
    if place.lat is None or place.lng is None:
        return None
    return f"SRID=4326;POINT({place.lng} {place.lat})"


def linestring_ewkt(polyline: list[LatLng]) -> str | None:
    if len(polyline) < 2:
        return None
    pairs = ", ".join(f"{point.lng} {point.lat}" for point in polyline)
    return f"SRID=4326;LINESTRING({pairs})"


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _place(row: dict, prefix: str, with_radius: bool = True) -> Place:
    return Place(
        label=row.get(f"{prefix}_label") or "",
        lat=_optional_float(row.get(f"{prefix}_lat")),
        lng=_optional_float(row.get(f"{prefix}_lng")),
        radius_m=float(row.get(f"{prefix}_radius_m") or 0) if with_radius else 0.0,
    )


def _route(value: Any) -> list[LatLng]:
    if not value:
        return []
    geojson = json.loads(value) if isinstance(value, str) else value
    return [LatLng(lat=float(pair[1]), lng=float(pair[0])) for pair in geojson.get("coordinates", [])]


def _search_term(search: Optional[str]) -> str:
    # Characters with meaning inside a PostgREST or=(...) filter.
    return "".join(ch for ch in (search or "").strip() if ch not in ",()*%\\\"")


def freight_from_row(row: dict) -> Freight:
    return Freight(
        id=str(row["id"]),
        shipper_id=str(row["shipper_id"]),
        pickup=_place(row, "pickup"),
        dropoff=_place(row, "dropoff"),
        notes=row.get("notes"),
        status=FreightStatus(row.get("status") or "OPEN"),
        distance_m=row.get("distance_m"),
        duration_s=row.get("duration_s"),
        price_total_cents=row.get("price_total_cents"),
        driver_payout_cents=row.get("driver_payout_cents"),
        currency=row.get("currency") or "BRL",
        created_at=_timestamp(row["created_at"]),
    )


def trip_from_row(row: dict) -> Trip:
    return Trip(
        id=str(row["id"]),
        driver_id=str(row["driver_id"]),
        origin=_place(row, "origin", with_radius=False),
        destination=_place(row, "destination", with_radius=False),
        corridor_radius_m=float(row["corridor_radius_m"]),
        profile=TravelProfile(row.get("profile") or TravelProfile.CAR.value),
        route=_route(row.get("route_geojson")),
        route_distance_m=row.get("route_distance_m"),
        route_duration_s=row.get("route_duration_s"),
        status=TripStatus(row.get("status") or "OPEN"),
        created_at=_timestamp(row["created_at"]),
    )


def match_request_from_row(row: dict) -> MatchRequest:
    return MatchRequest(
        id=str(row["id"]),
        freight_id=str(row["freight_id"]),
        trip_id=str(row["trip_id"]),
        driver_id=str(row["driver_id"]),
        shipper_id=str(row["shipper_id"]),
        status=MatchRequestStatus(row["status"]),
        created_at=_timestamp(row["created_at"]),
        updated_at=_timestamp(row.get("updated_at") or row["created_at"]),
    )


class SupabaseStore(MarketplaceStore):
    def __init__(self, client: Client) -> None:
        self.client = client

    def get_freight(self, freight_id: str) -> Optional[Freight]:
        response = self.client.table("freight_ui").select("*").eq("id", freight_id).limit(1).execute()
        rows = response.data or []
        return freight_from_row(rows[0]) if rows else None

    def save_freight(self, freight: Freight) -> Freight:
        self.client.table("freight").upsert(
            {
                "id": freight.id,
                "shipper_id": freight.shipper_id,
                "pickup_label": freight.pickup.label,
                "pickup_geom": point_ewkt(freight.pickup),
                "pickup_radius_m": freight.pickup.radius_m,
                "dropoff_label": freight.dropoff.label,
                "dropoff_geom": point_ewkt(freight.dropoff),
                "dropoff_radius_m": freight.dropoff.radius_m,
                "notes": freight.notes,
                "status": freight.status.value,
                "distance_m": freight.distance_m,
                "duration_s": freight.duration_s,
                "price_total_cents": freight.price_total_cents,
                "driver_payout_cents": freight.driver_payout_cents,
                "currency": freight.currency,
                "created_at": freight.created_at.isoformat(),
            }
        ).execute()
        return freight

    def list_open_freights(self, *, bounds: Optional[Bounds] = None, limit: int = 500) -> list[Freight]:
        query = self.client.table("freight_ui").select("*").eq("status", FreightStatus.OPEN.value)
        if bounds is not None:
            min_lng, min_lat, max_lng, max_lat = bounds
            for prefix in ("pickup", "dropoff"):
                query = (
                    query.gte(f"{prefix}_lng", min_lng)
                    .lte(f"{prefix}_lng", max_lng)
                    .gte(f"{prefix}_lat", min_lat)
                    .lte(f"{prefix}_lat", max_lat)
                )
        response = query.order("created_at", desc=True).order("id").limit(limit).execute()

        freights: list[Freight] = []
        for row in response.data or []:
            try:
                freights.append(freight_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid freight row {row.get('id')}: {e}")
        return freights

    def list_freights(
        self,
        *,
        shipper_id: Optional[str] = None,
        status: Optional[FreightStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Freight]:
        query = self.client.table("freight_ui").select("*")
        if shipper_id is not None:
            query = query.eq("shipper_id", shipper_id)
        if status is not None:
            query = query.eq("status", status.value)
        term = _search_term(search)
        if term:
            query = query.or_(f"pickup_label.ilike.*{term}*,dropoff_label.ilike.*{term}*,notes.ilike.*{term}*")
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [freight_from_row(row) for row in response.data or []]

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        response = self.client.table("trip_ui").select("*").eq("id", trip_id).limit(1).execute()
        rows = response.data or []
        return trip_from_row(rows[0]) if rows else None

    def save_trip(self, trip: Trip) -> Trip:
        self.client.table("trip").upsert(
            {
                "id": trip.id,
                "driver_id": trip.driver_id,
                "origin_label": trip.origin.label,
                "origin_geom": point_ewkt(trip.origin),
                "destination_label": trip.destination.label,
                "destination_geom": point_ewkt(trip.destination),
                "corridor_radius_m": trip.corridor_radius_m,
                "profile": trip.profile.value,
                "route_geom": linestring_ewkt(trip.route),
                "route_distance_m": trip.route_distance_m,
                "route_duration_s": trip.route_duration_s,
                "status": trip.status.value,
                "created_at": trip.created_at.isoformat(),
            }
        ).execute()
        return trip

    def list_trips(
        self,
        *,
        driver_id: Optional[str] = None,
        status: Optional[TripStatus] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Trip]:
        query = self.client.table("trip_ui").select("*")
        if driver_id is not None:
            query = query.eq("driver_id", driver_id)
        if status is not None:
            query = query.eq("status", status.value)
        term = _search_term(search)
        if term:
            query = query.or_(f"origin_label.ilike.*{term}*,destination_label.ilike.*{term}*")
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [trip_from_row(row) for row in response.data or []]

    def get_contact(self, user_id: str) -> Optional[Contact]:
        response = self.client.table("profiles").select("id, full_name, phone").eq("id", user_id).limit(1).execute()
        rows = response.data or []
        if not rows:
            return None
        return Contact(user_id=str(rows[0]["id"]), name=rows[0].get("full_name"), phone=rows[0].get("phone"))

    def save_contact(self, contact: Contact) -> Contact:
        self.client.table("profiles").upsert(
            {"id": contact.user_id, "full_name": contact.name, "phone": contact.phone}
        ).execute()
        return contact

    def get_match_request(self, request_id: str) -> Optional[MatchRequest]:
        response = self.client.table("match_request").select("*").eq("id", request_id).limit(1).execute()
        rows = response.data or []
        return match_request_from_row(rows[0]) if rows else None

    def insert_match_request(self, request: MatchRequest) -> MatchRequest:
        try:
            response = self.client.table("match_request").insert(
                {
                    "id": request.id,
                    "freight_id": request.freight_id,
                    "trip_id": request.trip_id,
                    "driver_id": request.driver_id,
                    "shipper_id": request.shipper_id,
                    "status": request.status.value,
                    "created_at": request.created_at.isoformat(),
                    "updated_at": request.updated_at.isoformat(),
                }
            ).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicatePendingRequest(
                    f"A pending request already exists for freight {request.freight_id} "
                    f"and trip {request.trip_id}."
                ) from exc
            raise
        rows = response.data or []
        return match_request_from_row(rows[0]) if rows else request

    def transition_match_request(
        self,
        request_id: str,
        *,
        expected: MatchRequestStatus,
        new_status: MatchRequestStatus,
    ) -> MatchRequest:
        response = (
            self.client.table("match_request")
            .update({"status": new_status.value, "updated_at": datetime.now().astimezone().isoformat()})
            .eq("id", request_id)
            .eq("status", expected.value)
            .execute()
        )
        rows = response.data or []
        if rows:
            return match_request_from_row(rows[0])

        current = self.get_match_request(request_id)
        if current is None:
            raise NotFound(f"Match request {request_id} not found.")
        raise InvalidStateTransition(
            f"Match request {request_id} is {current.status.value}, expected {expected.value}."
        )

    def list_match_requests(
        self,
        *,
        trip_id: Optional[str] = None,
        shipper_id: Optional[str] = None,
        status: Optional[MatchRequestStatus] = None,
    ) -> list[MatchRequest]:
        query = self.client.table("match_request").select("*")
        if trip_id is not None:
            query = query.eq("trip_id", trip_id)
        if shipper_id is not None:
            query = query.eq("shipper_id", shipper_id)
        if status is not None:
            query = query.eq("status", status.value)
        response = query.order("created_at", desc=True).execute()
        return [match_request_from_row(row) for row in response.data or []]
