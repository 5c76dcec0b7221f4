"""HTTP client for the OSRM route service."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...errors import RouteComputationFailed
from ...models.domain import LatLng, TravelProfile
from .base import HTTPRoutingClient, RouteResult, require_waypoints

logger = logging.getLogger(__name__)

OSRM_PROFILES = {
    TravelProfile.CAR: "driving",
    TravelProfile.HGV: "driving-hgv",
}


class OSRMRouteClient(HTTPRoutingClient):
    provider_name = "OSRM"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base_url = base_url or settings.osrm_base_url
        if not base_url:
            raise ValueError("OSRM base URL is not configured.")
        super().__init__(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            transport=transport,
        )

    def route(self, coordinates: Sequence[LatLng], profile: TravelProfile) -> RouteResult:
        """Get the drivable route through ``coordinates``.

        OSRM expects "lon,lat;lon,lat;..." and answers with a Google-encoded
        polyline when ``geometries=polyline``.
        """
        require_waypoints(coordinates)
        coordinate_str = ";".join(f"{point.lng},{point.lat}" for point in coordinates)
        url = f"{self.base_url}/route/v1/{OSRM_PROFILES[TravelProfile(profile)]}/{coordinate_str}"
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        data = self._send("GET", url, params=params)
        if data.get("code") != "Ok":
            raise RouteComputationFailed(
                f"OSRM route request failed: {data.get('message', data.get('code', 'Unknown OSRM route error'))}"
            )
        routes = data.get("routes") or []
        if not routes:
            raise RouteComputationFailed("OSRM returned no routes.")

        best = routes[0]
        polyline = decode_polyline(best.get("geometry") or "")
        if len(polyline) < 2:
            raise RouteComputationFailed("OSRM returned an invalid route geometry.")
        distance = best.get("distance")
        duration = best.get("duration")
        return RouteResult(
            polyline=polyline,
            distance_m=round(distance) if distance is not None else None,
            duration_s=round(duration) if duration is not None else None,
        )


def _decode_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        b = ord(polyline[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    return (~(result >> 1) if (result & 1) else (result >> 1)), index


def decode_polyline(polyline: str, precision: int = 5) -> list[LatLng]:
    """Decode a Google encoded polyline into coordinates."""

    factor = 10 ** precision
    coordinates: list[LatLng] = []
    index = 0
    lat = 0
    lng = 0
    try:
        while index < len(polyline):
            d_lat, index = _decode_value(polyline, index)
            d_lng, index = _decode_value(polyline, index)
            lat += d_lat
            lng += d_lng
            coordinates.append(LatLng(lat=lat / factor, lng=lng / factor))
    except IndexError as exc:
        raise RouteComputationFailed("OSRM returned a truncated polyline.") from exc
    return coordinates
