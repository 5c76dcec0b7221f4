import math

import pytest

from src.freightmatch.errors import InvalidGeometry
from src.freightmatch.models.domain import LatLng
from src.freightmatch.services.geospatial import (
    EARTH_RADIUS_M,
    envelope_covers,
    haversine_m,
    project_point_onto_polyline,
    route_envelope,
)

ROUTE = [LatLng(0.0, 0.0), LatLng(0.0, 1.0)]


def test_haversine_one_degree_at_equator():
    expected = 6_371_000.0 * math.radians(1.0)

    assert haversine_m(LatLng(0.0, 0.0), LatLng(0.0, 1.0)) == pytest.approx(expected, rel=1e-9)
    assert haversine_m(LatLng(0.0, 0.0), LatLng(1.0, 0.0)) == pytest.approx(expected, rel=1e-9)


def test_haversine_known_city_pair():
    sao_paulo = LatLng(-23.5505, -46.6333)
    rio = LatLng(-22.9068, -43.1729)

    # ~361 km great-circle distance
    assert haversine_m(sao_paulo, rio) == pytest.approx(361_000, rel=0.01)


def test_projection_on_straight_route():
    projection = project_point_onto_polyline(LatLng(0.001, 0.3), ROUTE)

    assert projection.fraction == pytest.approx(0.3, abs=1e-6)
    assert projection.distance_m == pytest.approx(111.19, rel=1e-3)


def test_projection_clamps_beyond_route_ends():
    before = project_point_onto_polyline(LatLng(0.0, -0.5), ROUTE)
    after = project_point_onto_polyline(LatLng(0.0, 1.5), ROUTE)

    assert before.fraction == 0.0
    assert after.fraction == 1.0
    assert before.distance_m == pytest.approx(haversine_m(LatLng(0.0, -0.5), ROUTE[0]), rel=1e-3)


def test_projection_fraction_spans_whole_polyline():
    route = [LatLng(0.0, 0.0), LatLng(0.0, 1.0), LatLng(1.0, 1.0)]

    projection = project_point_onto_polyline(LatLng(0.5, 1.001), route)

    assert projection.fraction == pytest.approx(0.75, abs=1e-3)
    assert projection.distance_m < 200


def test_projection_on_zero_length_polyline():
    route = [LatLng(1.0, 1.0), LatLng(1.0, 1.0)]

    projection = project_point_onto_polyline(LatLng(1.0, 1.01), route)

    assert projection.fraction == 0.0
    assert projection.distance_m == pytest.approx(haversine_m(LatLng(1.0, 1.0), LatLng(1.0, 1.01)), rel=1e-3)


@pytest.mark.parametrize(
    "polyline",
    [
        [],
        [LatLng(0.0, 0.0)],
        [LatLng(0.0, 0.0), LatLng(95.0, 0.0)],
        [LatLng(0.0, 0.0), LatLng(float("nan"), 1.0)],
    ],
)
def test_projection_rejects_invalid_polylines(polyline):
    with pytest.raises(InvalidGeometry):
        project_point_onto_polyline(LatLng(0.0, 0.5), polyline)


def test_route_envelope_expands_by_radius():
    envelope = route_envelope(ROUTE, 50_000)

    assert envelope_covers(envelope, LatLng(0.4, 0.5))
    assert envelope_covers(envelope, LatLng(0.0, -0.4))
    assert not envelope_covers(envelope, LatLng(0.5, 0.5))
    assert not envelope_covers(envelope, LatLng(5.0, 0.3))


@pytest.mark.parametrize("lat", [0.0, 35.0, 60.0, -45.0])
def test_route_envelope_contains_points_just_inside_radius(lat):
    radius = 50_000
    route = [LatLng(lat, 10.0), LatLng(lat, 11.0)]
    d_lat = math.degrees(radius * 0.999 / EARTH_RADIUS_M)
    d_lng = d_lat / math.cos(math.radians(lat))
    envelope = route_envelope(route, radius)

    for point in (LatLng(lat + d_lat, 10.5), LatLng(lat - d_lat, 10.5), LatLng(lat, 11.0 + d_lng)):
        assert project_point_onto_polyline(point, route).distance_m <= radius
        assert envelope_covers(envelope, point)
