"""Geospatial helper functions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from shapely.geometry import LineString, Point, Polygon, box

from ..errors import InvalidGeometry
from ..models.domain import LatLng

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180.0
# Envelope padding; the box must contain every point within the radius.
ENVELOPE_MARGIN = 1.01


@dataclass(frozen=True, slots=True)
class Projection:
    """Closest approach of a point to a polyline."""

    distance_m: float
    fraction: float


def validate_point(point: LatLng) -> LatLng:
    """Raise InvalidGeometry unless the point is a finite, in-range coordinate."""

    lat, lng = point.lat, point.lng
    if lat is None or lng is None:
        raise InvalidGeometry("Coordinate is missing latitude or longitude.")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidGeometry(f"Coordinate ({lat}, {lng}) is not finite.")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise InvalidGeometry(f"Coordinate ({lat}, {lng}) is out of range.")
    return point


def validate_polyline(polyline: Sequence[LatLng]) -> Sequence[LatLng]:
    if len(polyline) < 2:
        raise InvalidGeometry(f"Polyline needs at least 2 points, got {len(polyline)}.")
    for point in polyline:
        validate_point(point)
    return polyline


def haversine_m(a: LatLng, b: LatLng) -> float:
    """Compute distance in meters between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def polyline_length_m(polyline: Sequence[LatLng]) -> float:
    return sum(haversine_m(a, b) for a, b in zip(polyline, polyline[1:]))


def project_point_onto_polyline(point: LatLng, polyline: Sequence[LatLng]) -> Projection:
    """Project ``point`` onto ``polyline`` and return distance and fractional position.

    Each segment is flattened with an equirectangular projection centred on the
    segment's mid-latitude, which is accurate for the short segments produced
    by routing providers. The fraction is measured along the whole polyline
    using haversine segment lengths. When two segments are equally close the
    earlier one wins.
    """
    validate_polyline(polyline)
    validate_point(point)

    segment_lengths = [haversine_m(a, b) for a, b in zip(polyline, polyline[1:])]
    total_length = sum(segment_lengths)

    best_distance = math.inf
    best_fraction = 0.0
    travelled = 0.0
    for (start, end), segment_length in zip(zip(polyline, polyline[1:]), segment_lengths):
        k = math.cos(math.radians((start.lat + end.lat) / 2))
        end_x = math.radians(end.lng - start.lng) * k * EARTH_RADIUS_M
        end_y = math.radians(end.lat - start.lat) * EARTH_RADIUS_M
        point_x = math.radians(point.lng - start.lng) * k * EARTH_RADIUS_M
        point_y = math.radians(point.lat - start.lat) * EARTH_RADIUS_M

        squared = end_x * end_x + end_y * end_y
        if squared == 0.0:
            t = 0.0
        else:
            t = min(1.0, max(0.0, (point_x * end_x + point_y * end_y) / squared))

        distance = math.hypot(point_x - t * end_x, point_y - t * end_y)
        if distance < best_distance:
            best_distance = distance
            best_fraction = (travelled + t * segment_length) / total_length if total_length > 0 else 0.0
        travelled += segment_length

    return Projection(distance_m=best_distance, fraction=min(1.0, max(0.0, best_fraction)))


def route_envelope(polyline: Sequence[LatLng], radius_m: float) -> Polygon:
    """Bounding box of the polyline expanded by ``radius_m`` (lng/lat axis order)."""

    validate_polyline(polyline)
    min_lng, min_lat, max_lng, max_lat = LineString([(p.lng, p.lat) for p in polyline]).bounds
    d_lat = radius_m * ENVELOPE_MARGIN / METERS_PER_DEGREE
    widest_lat = min(89.9, max(abs(min_lat), abs(max_lat)) + d_lat)
    d_lng = radius_m * ENVELOPE_MARGIN / (METERS_PER_DEGREE * max(0.01, math.cos(math.radians(widest_lat))))
    return box(min_lng - d_lng, min_lat - d_lat, max_lng + d_lng, max_lat + d_lat)


def envelope_covers(envelope: Polygon, point: LatLng) -> bool:
    return envelope.covers(Point(point.lng, point.lat))
