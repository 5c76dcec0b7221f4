"""Route corridor: the tolerance band of a given radius around a route polyline."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import Polygon

from ...errors import InvalidGeometry
from ...models.domain import LatLng
from ..geospatial import (
    Projection,
    envelope_covers,
    project_point_onto_polyline,
    route_envelope,
    validate_polyline,
)


def is_within_corridor(point: LatLng, polyline: Sequence[LatLng], radius_m: float) -> bool:
    """Return True if ``point`` lies within ``radius_m`` of the polyline."""

    return project_point_onto_polyline(point, polyline).distance_m <= radius_m


class Corridor:
    """A validated route polyline paired with its caller-supplied radius."""

    def __init__(self, polyline: Sequence[LatLng], radius_m: float) -> None:
        self.polyline = tuple(validate_polyline(polyline))
        if radius_m is None or not math.isfinite(radius_m) or radius_m <= 0:
            raise InvalidGeometry(f"Corridor radius must be a positive number of meters, got {radius_m}.")
        self.radius_m = float(radius_m)
        self._envelope: Polygon | None = None

    @property
    def envelope(self) -> Polygon:
        if self._envelope is None:
            self._envelope = route_envelope(self.polyline, self.radius_m)
        return self._envelope

    def project(self, point: LatLng) -> Projection:
        return project_point_onto_polyline(point, self.polyline)

    def contains(self, point: LatLng) -> bool:
        return self.project(point).distance_m <= self.radius_m

    def position(self, point: LatLng) -> float:
        return self.project(point).fraction

    def may_contain(self, point: LatLng) -> bool:
        """Cheap bounding-box test; False means the point is certainly outside."""
        return envelope_covers(self.envelope, point)
