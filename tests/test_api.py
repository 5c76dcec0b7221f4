import pytest
from fastapi.testclient import TestClient

from src.freightmatch.api.deps import get_routing, get_store
from src.freightmatch.errors import RouteComputationFailed
from src.freightmatch.main import create_app
from src.freightmatch.models.domain import Place, Trip
from src.freightmatch.persistence.store import InMemoryStore
from src.freightmatch.services.routing import RouteResult


class DummyRouting:
    def route(self, coordinates, profile):
        return RouteResult(polyline=list(coordinates), distance_m=111_195, duration_s=4_000)


class DownRouting:
    def route(self, coordinates, profile):
        raise RouteComputationFailed("openrouteservice unavailable")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client(store):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_routing] = lambda: DummyRouting()
    with TestClient(app) as test_client:
        yield test_client, app


def _place(label, lat, lng):
    return {"label": label, "lat": lat, "lng": lng}


def _create_trip(test_client, driver_id="D1"):
    response = test_client.post(
        "/api/trips",
        json={
            "driver_id": driver_id,
            "origin": _place("Origin", 0.0, 0.0),
            "destination": _place("Destination", 0.0, 1.0),
            "corridor_radius_m": 50_000,
        },
    )
    assert response.status_code == 201
    return response.json()


def _create_freight(test_client, shipper_id="S1", pickup=(0.001, 0.3), dropoff=(0.001, 0.7)):
    response = test_client.post(
        "/api/freights",
        json={
            "shipper_id": shipper_id,
            "pickup": _place("Pickup", *pickup),
            "dropoff": _place("Dropoff", *dropoff),
            "notes": "pallets",
        },
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    test_client, _ = client

    assert test_client.get("/api/health").json() == {"status": "ok"}
    assert test_client.get("/api/health/database").json()["backend"] == "memory"
    assert test_client.get("/").json()["status"] == "running"


def test_match_flow(client):
    test_client, _ = client
    freight = _create_freight(test_client)
    _create_freight(test_client, pickup=(0.001, 0.7), dropoff=(0.001, 0.3))
    trip = _create_trip(test_client)

    matches = test_client.get(f"/api/trips/{trip['id']}/matches").json()
    assert [match["freight_id"] for match in matches["matches"]] == [freight["id"]]
    assert matches["skipped_count"] == 0

    proposal = {"trip_id": trip["id"], "freight_id": freight["id"], "driver_id": "D1"}
    created = test_client.post("/api/match-requests", json=proposal)
    assert created.status_code == 201
    assert created.json()["status"] == "PENDING"
    request_id = created.json()["id"]

    duplicate = test_client.post("/api/match-requests", json=proposal)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "DUPLICATE_PENDING_REQUEST"

    inbox = test_client.get("/api/shippers/S1/match-requests").json()
    assert [item["id"] for item in inbox] == [request_id]

    accepted = test_client.post(
        f"/api/match-requests/{request_id}/respond", json={"decision": "ACCEPT", "shipper_id": "S1"}
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "ACCEPTED"

    rejected = test_client.post(
        f"/api/match-requests/{request_id}/respond", json={"decision": "REJECT", "shipper_id": "S1"}
    )
    assert rejected.status_code == 409
    assert rejected.json()["error"] == "INVALID_STATE_TRANSITION"

    assert test_client.get("/api/shippers/S1/match-requests").json() == []
    history = test_client.get(f"/api/trips/{trip['id']}/match-requests").json()
    assert [item["status"] for item in history] == ["ACCEPTED"]


def test_respond_by_other_shipper_is_forbidden(client):
    test_client, _ = client
    freight = _create_freight(test_client)
    trip = _create_trip(test_client)
    request_id = test_client.post(
        "/api/match-requests", json={"trip_id": trip["id"], "freight_id": freight["id"], "driver_id": "D1"}
    ).json()["id"]

    response = test_client.post(
        f"/api/match-requests/{request_id}/respond", json={"decision": "ACCEPT", "shipper_id": "S2"}
    )

    assert response.status_code == 403
    assert response.json()["error"] == "FORBIDDEN"


def test_matches_for_trip_without_route(client, store):
    test_client, _ = client
    store.save_trip(
        Trip(
            id="T-no-route",
            driver_id="D1",
            origin=Place("Origin", 0.0, 0.0),
            destination=Place("Destination", 0.0, 1.0),
            corridor_radius_m=10_000,
        )
    )

    response = test_client.get("/api/trips/T-no-route/matches")

    assert response.status_code == 409
    assert response.json()["error"] == "ROUTE_NOT_READY"


def test_unknown_trip_is_404(client):
    test_client, _ = client

    response = test_client.get("/api/trips/missing/matches")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_match_limit_is_validated(client):
    test_client, _ = client
    trip = _create_trip(test_client)

    assert test_client.get(f"/api/trips/{trip['id']}/matches", params={"limit": 0}).status_code == 422


def test_routing_failure_returns_502(client, store):
    test_client, app = client
    app.dependency_overrides[get_routing] = lambda: DownRouting()

    response = test_client.post(
        "/api/trips",
        json={
            "driver_id": "D1",
            "origin": _place("Origin", 0.0, 0.0),
            "destination": _place("Destination", 0.0, 1.0),
        },
    )

    assert response.status_code == 502
    assert response.json()["error"] == "ROUTE_COMPUTATION_FAILED"
    assert store._trips == {}


def test_route_preview(client):
    test_client, _ = client

    response = test_client.post(
        "/api/trips/route-preview",
        json={"coordinates": [{"lat": 0.0, "lng": 0.0}, {"lat": 0.0, "lng": 1.0}]},
    )

    assert response.status_code == 200
    assert response.json()["route"][-1] == {"lat": 0.0, "lng": 1.0}
    assert response.json()["distance_m"] == 111_195


def test_close_freight_twice_conflicts(client):
    test_client, _ = client
    freight = _create_freight(test_client)

    first = test_client.post(f"/api/freights/{freight['id']}/close", json={"shipper_id": "S1"})
    second = test_client.post(f"/api/freights/{freight['id']}/close", json={"shipper_id": "S1"})

    assert first.json()["status"] == "CLOSED"
    assert second.status_code == 409


def test_owner_listings(client):
    test_client, _ = client
    trip = _create_trip(test_client)
    _create_trip(test_client, driver_id="D2")
    freight = _create_freight(test_client)

    trips = test_client.get("/api/drivers/D1/trips", params={"status": "OPEN", "q": "origin"}).json()
    freights = test_client.get("/api/shippers/S1/freights", params={"q": "pallets"}).json()

    assert [item["id"] for item in trips] == [trip["id"]]
    assert [item["id"] for item in freights] == [freight["id"]]
    assert test_client.get("/api/shippers/S1/freights", params={"status": "CLOSED"}).json() == []


def test_match_request_detail_after_accept(client):
    test_client, _ = client
    freight = _create_freight(test_client)
    trip = _create_trip(test_client)
    assert test_client.put("/api/users/S1/contact", json={"name": "Ana", "phone": "+55 11 90000-0000"}).status_code == 200
    test_client.put("/api/users/D1/contact", json={"phone": "+55 21 91111-1111"})
    request_id = test_client.post(
        "/api/match-requests", json={"trip_id": trip["id"], "freight_id": freight["id"], "driver_id": "D1"}
    ).json()["id"]

    before = test_client.get(f"/api/match-requests/{request_id}", params={"user_id": "D1"}).json()
    test_client.post(f"/api/match-requests/{request_id}/respond", json={"decision": "ACCEPT", "shipper_id": "S1"})
    after = test_client.get(f"/api/match-requests/{request_id}", params={"user_id": "D1"}).json()
    outsider = test_client.get(f"/api/match-requests/{request_id}", params={"user_id": "X"})

    assert before["shipper_contact_phone"] is None
    assert after["shipper_contact_name"] == "Ana"
    assert after["driver_phone"] == "+55 21 91111-1111"
    assert outsider.status_code == 403


def test_empty_contact_is_rejected(client):
    test_client, _ = client

    response = test_client.put("/api/users/S1/contact", json={"name": "  "})

    assert response.status_code == 400
    assert test_client.get("/api/users/S1/contact").status_code == 404
