"""HTTP client for the openrouteservice directions API."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...errors import RouteComputationFailed
from ...models.domain import LatLng, TravelProfile
from .base import HTTPRoutingClient, RouteResult, require_waypoints

logger = logging.getLogger(__name__)


class OpenRouteServiceClient(HTTPRoutingClient):
    provider_name = "openrouteservice"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        api_key = api_key or settings.ors_api_key
        if not api_key:
            raise ValueError("openrouteservice API key is not configured.")
        super().__init__(
            base_url or settings.ors_base_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            transport=transport,
        )
        self.api_key = api_key

    def directions(
        self,
        coordinates: Sequence[LatLng],
        profile: TravelProfile,
    ) -> dict:
        """Return the raw GeoJSON FeatureCollection for the route."""

        require_waypoints(coordinates)
        payload: dict = {
            "coordinates": [[point.lng, point.lat] for point in coordinates],
            "instructions": False,
        }
        url = f"{self.base_url}/v2/directions/{TravelProfile(profile).value}/geojson"
        return self._send(
            "POST",
            url,
            json=payload,
            headers={"Authorization": self.api_key, "Content-Type": "application/json"},
        )

    def route(self, coordinates: Sequence[LatLng], profile: TravelProfile) -> RouteResult:
        return parse_geojson_route(self.directions(coordinates, profile))


def parse_geojson_route(data: dict) -> RouteResult:
    """Extract polyline and totals from an openrouteservice GeoJSON response."""

    try:
        features = data.get("features") or []
        if not features:
            raise RouteComputationFailed("openrouteservice returned no route features.")
        feature = features[0]
        raw_coordinates = (feature.get("geometry") or {}).get("coordinates") or []
        if len(raw_coordinates) < 2:
            raise RouteComputationFailed("openrouteservice returned an invalid route geometry.")

        polyline = [LatLng(lat=float(pair[1]), lng=float(pair[0])) for pair in raw_coordinates]
        summary = (feature.get("properties") or {}).get("summary") or {}
        distance = summary.get("distance")
        duration = summary.get("duration")
        return RouteResult(
            polyline=polyline,
            distance_m=round(distance) if distance is not None else None,
            duration_s=round(duration) if duration is not None else None,
        )
    except (TypeError, ValueError, IndexError, KeyError, AttributeError) as exc:
        raise RouteComputationFailed(f"openrouteservice returned a malformed route: {exc}") from exc
