import json

import httpx
import pytest

from src.freightmatch.errors import RouteComputationFailed
from src.freightmatch.models.domain import LatLng, TravelProfile
from src.freightmatch.services.routing import OpenRouteServiceClient, OSRMRouteClient, decode_polyline

WAYPOINTS = [LatLng(-23.55, -46.63), LatLng(-22.91, -43.17)]


def _ors_payload() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[-46.63, -23.55], [-45.0, -23.2], [-43.17, -22.91]],
                },
                "properties": {"summary": {"distance": 432100.6, "duration": 19800.4}},
            }
        ],
    }


def _ors_client(handler, **kwargs) -> OpenRouteServiceClient:
    return OpenRouteServiceClient(
        base_url="https://ors.test",
        api_key="secret",
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_ors_route_parses_geojson():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ors_payload())

    result = _ors_client(handler).route(WAYPOINTS, TravelProfile.HGV)

    assert seen["url"] == "https://ors.test/v2/directions/driving-hgv/geojson"
    assert seen["auth"] == "secret"
    assert seen["body"]["coordinates"] == [[-46.63, -23.55], [-43.17, -22.91]]
    assert result.polyline[0] == LatLng(-23.55, -46.63)
    assert len(result.polyline) == 3
    assert result.distance_m == 432101
    assert result.duration_s == 19800


def test_ors_client_error_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404, json={"error": {"code": 2010, "message": "Could not find routable point"}})

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler, max_retries=3).route(WAYPOINTS, TravelProfile.CAR)
    assert len(calls) == 1


def test_ors_rate_limit_is_retried_then_fails():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, json={"error": "Rate limit exceeded"})

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler, max_retries=2).route(WAYPOINTS, TravelProfile.CAR)
    assert len(calls) == 3


def test_ors_recovers_after_transient_failure():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json=_ors_payload())

    result = _ors_client(handler, max_retries=2).route(WAYPOINTS, TravelProfile.CAR)

    assert len(result.polyline) == 3
    assert len(calls) == 2


def test_ors_timeout_becomes_route_computation_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler, max_retries=1).route(WAYPOINTS, TravelProfile.CAR)


def test_ors_empty_geometry_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"features": [{"geometry": {"coordinates": [[0, 0]]}}]})

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler).route(WAYPOINTS, TravelProfile.CAR)


def test_ors_requires_api_key(monkeypatch):
    from src.freightmatch.config import settings

    monkeypatch.setattr(settings, "ors_api_key", None)
    with pytest.raises(ValueError):
        OpenRouteServiceClient(base_url="https://ors.test")


def test_route_needs_two_waypoints():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_ors_payload())

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler).route(WAYPOINTS[:1], TravelProfile.CAR)


def test_decode_polyline_reference_example():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")

    assert points == [LatLng(38.5, -120.2), LatLng(40.7, -120.95), LatLng(43.252, -126.453)]


def test_osrm_route_decodes_geometry():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [{"geometry": "_p~iF~ps|U_ulLnnqC_mqNvxq`@", "distance": 1234.4, "duration": 99.6}],
            },
        )

    client = OSRMRouteClient(base_url="http://osrm.test", transport=httpx.MockTransport(handler))
    result = client.route(WAYPOINTS, TravelProfile.CAR)

    assert seen["path"] == "/route/v1/driving/-46.63,-23.55;-43.17,-22.91"
    assert seen["params"]["overview"] == "full"
    assert result.polyline[-1] == LatLng(43.252, -126.453)
    assert result.distance_m == 1234
    assert result.duration_s == 100


def test_osrm_no_route():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route between points"})

    client = OSRMRouteClient(base_url="http://osrm.test", transport=httpx.MockTransport(handler))
    with pytest.raises(RouteComputationFailed):
        client.route(WAYPOINTS, TravelProfile.HGV)


def test_get_routing_provider_follows_settings(monkeypatch):
    from src.freightmatch.config import settings
    from src.freightmatch.services.routing import get_routing_provider

    monkeypatch.setattr(settings, "routing_provider", "osrm")
    monkeypatch.setattr(settings, "osrm_base_url", "http://osrm.test")
    assert isinstance(get_routing_provider(), OSRMRouteClient)

    monkeypatch.setattr(settings, "routing_provider", "openrouteservice")
    monkeypatch.setattr(settings, "ors_api_key", "secret")
    assert isinstance(get_routing_provider(), OpenRouteServiceClient)


def test_check_health_reports_failures():
    from src.freightmatch.services.routing import RouteResult, check_health

    class DummyProvider:
        def route(self, coordinates, profile):
            return RouteResult(polyline=list(coordinates))

    class BrokenProvider:
        def route(self, coordinates, profile):
            raise RouteComputationFailed("down")

    assert check_health(DummyProvider()) is True
    assert check_health(BrokenProvider()) is False


@pytest.mark.parametrize(
    "payload",
    [
        {"features": [{"geometry": {"coordinates": [[1], [2]]}}]},
        {"features": [{"geometry": {"coordinates": [None, [-43.17, -22.91]]}}]},
        {"features": ["not-a-feature"]},
        ["unexpected", "list"],
    ],
)
def test_ors_malformed_payload_is_route_computation_failed(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(RouteComputationFailed):
        _ors_client(handler).route(WAYPOINTS, TravelProfile.CAR)


def test_ors_zero_length_summary_is_kept():
    payload = _ors_payload()
    payload["features"][0]["properties"]["summary"] = {"distance": 0, "duration": 0.0}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    result = _ors_client(handler).route(WAYPOINTS, TravelProfile.CAR)

    assert result.distance_m == 0
    assert result.duration_s == 0
