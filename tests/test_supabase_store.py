from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from src.freightmatch.errors import DuplicatePendingRequest, InvalidStateTransition, NotFound
from src.freightmatch.models.domain import (
    FreightStatus,
    LatLng,
    MatchRequest,
    MatchRequestStatus,
    TravelProfile,
    TripStatus,
)
from src.freightmatch.persistence.supabase_store import (
    SupabaseStore,
    freight_from_row,
    linestring_ewkt,
    trip_from_row,
)

REQUEST_ROW = {
    "id": "R1",
    "freight_id": "F1",
    "trip_id": "T1",
    "driver_id": "D1",
    "shipper_id": "S1",
    "status": "PENDING",
    "created_at": "2025-01-01T10:00:00Z",
    "updated_at": "2025-01-01T10:00:00Z",
}


class DummyQuery:
    """Chainable stand-in for a PostgREST request builder."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def execute(self):
        self.client.executed.append(self)
        return self.client.respond(self)


class DummyClient:
    def __init__(self, respond):
        self.respond = respond
        self.executed = []

    def table(self, name):
        return DummyQuery(self, name)


def _request() -> MatchRequest:
    return MatchRequest(id="R2", freight_id="F1", trip_id="T1", driver_id="D1", shipper_id="S1")


def test_unique_violation_becomes_duplicate_pending_request():
    def respond(query):
        raise APIError({"code": "23505", "message": "duplicate key value violates unique constraint"})

    store = SupabaseStore(DummyClient(respond))

    with pytest.raises(DuplicatePendingRequest):
        store.insert_match_request(_request())


def test_other_insert_errors_propagate():
    def respond(query):
        raise APIError({"code": "42501", "message": "permission denied"})

    with pytest.raises(APIError):
        SupabaseStore(DummyClient(respond)).insert_match_request(_request())


def test_transition_is_conditional_on_expected_status():
    def respond(query):
        return SimpleNamespace(data=[dict(REQUEST_ROW, status="ACCEPTED")])

    client = DummyClient(respond)
    updated = SupabaseStore(client).transition_match_request(
        "R1", expected=MatchRequestStatus.PENDING, new_status=MatchRequestStatus.ACCEPTED
    )

    update = client.executed[0]
    assert updated.status is MatchRequestStatus.ACCEPTED
    assert ("eq", ("status", "PENDING"), {}) in update.calls
    assert ("eq", ("id", "R1"), {}) in update.calls


def test_lost_transition_race_is_invalid_state_transition():
    def respond(query):
        if any(name == "update" for name, _, _ in query.calls):
            return SimpleNamespace(data=[])
        return SimpleNamespace(data=[dict(REQUEST_ROW, status="REJECTED")])

    with pytest.raises(InvalidStateTransition):
        SupabaseStore(DummyClient(respond)).transition_match_request(
            "R1", expected=MatchRequestStatus.PENDING, new_status=MatchRequestStatus.ACCEPTED
        )


def test_transition_of_unknown_request_is_not_found():
    def respond(query):
        return SimpleNamespace(data=[])

    with pytest.raises(NotFound):
        SupabaseStore(DummyClient(respond)).transition_match_request(
            "missing", expected=MatchRequestStatus.PENDING, new_status=MatchRequestStatus.CANCELLED
        )


def test_trip_row_parses_route_geojson():
    row = {
        "id": "T1",
        "driver_id": "D1",
        "origin_label": "São Paulo",
        "origin_lat": -23.55,
        "origin_lng": -46.63,
        "destination_label": "Rio",
        "destination_lat": -22.91,
        "destination_lng": -43.17,
        "corridor_radius_m": "25000",
        "profile": "driving-hgv",
        "route_geojson": '{"type": "LineString", "coordinates": [[-46.63, -23.55], [-43.17, -22.91]]}',
        "status": "OPEN",
        "created_at": "2025-01-01T10:00:00+00:00",
    }

    trip = trip_from_row(row)

    assert trip.route == [LatLng(-23.55, -46.63), LatLng(-22.91, -43.17)]
    assert trip.corridor_radius_m == 25_000
    assert trip.profile is TravelProfile.HGV
    assert trip.status is TripStatus.OPEN
    assert trip_from_row(dict(row, route_geojson=None)).route == []


def test_freight_row_keeps_missing_coordinates():
    row = {
        "id": "F1",
        "shipper_id": "S1",
        "pickup_label": "Pickup",
        "pickup_lat": None,
        "pickup_lng": None,
        "dropoff_label": "Dropoff",
        "dropoff_lat": -22.91,
        "dropoff_lng": -43.17,
        "dropoff_radius_m": 300,
        "status": "CLOSED",
        "created_at": "2025-01-01T10:00:00Z",
    }

    freight = freight_from_row(row)

    assert freight.pickup.to_latlng() is None
    assert freight.dropoff.radius_m == 300
    assert freight.status is FreightStatus.CLOSED
    assert freight.currency == "BRL"


def test_linestring_ewkt_uses_lng_lat_order():
    assert linestring_ewkt([LatLng(1.0, 2.0), LatLng(3.0, 4.0)]) == "SRID=4326;LINESTRING(2.0 1.0, 4.0 3.0)"
    assert linestring_ewkt([LatLng(1.0, 2.0)]) is None


def test_list_trips_applies_filters_and_search():
    def respond(query):
        return SimpleNamespace(data=[])

    client = DummyClient(respond)
    SupabaseStore(client).list_trips(driver_id="D1", status=TripStatus.OPEN, search=" Rio,(x) ", limit=10)

    query = client.executed[0]
    assert query.table == "trip_ui"
    assert ("eq", ("driver_id", "D1"), {}) in query.calls
    assert ("or_", ("origin_label.ilike.*Riox*,destination_label.ilike.*Riox*",), {}) in query.calls
    assert ("limit", (10,), {}) in query.calls


def test_get_store_reports_client_creation_failure(monkeypatch):
    from src.freightmatch.api import deps
    from src.freightmatch.config import settings
    from src.freightmatch.db import supabase as supabase_db

    def broken_create_client(url, key):
        raise ValueError("Invalid API key")

    monkeypatch.setattr(settings, "store_backend", "supabase")
    monkeypatch.setattr(settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(settings, "supabase_key", "not-a-key")
    monkeypatch.setattr(supabase_db, "create_client", broken_create_client)
    deps.get_store.cache_clear()
    supabase_db.get_supabase_client.cache_clear()
    try:
        with pytest.raises(RuntimeError, match="Invalid API key") as excinfo:
            deps.get_store()
        assert isinstance(excinfo.value.__cause__, ValueError)
    finally:
        deps.get_store.cache_clear()
        supabase_db.get_supabase_client.cache_clear()
