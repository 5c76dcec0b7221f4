"""Routing provider selection and health checks."""

from __future__ import annotations

import logging

from ...config import settings
from ...errors import RouteComputationFailed
from ...models.domain import LatLng, TravelProfile
from .base import RoutingProvider
from .ors_client import OpenRouteServiceClient
from .osrm_client import OSRMRouteClient

logger = logging.getLogger(__name__)

# Two points a few kilometres apart in Berlin, routable on public instances.
_HEALTH_PROBE = (LatLng(52.517037, 13.388860), LatLng(52.496891, 13.385983))


def get_routing_provider() -> RoutingProvider:
    """Build the client configured by ``settings.routing_provider``.

    Raises ValueError when the provider is missing its URL or API key.
    """
    if settings.routing_provider == "osrm":
        return OSRMRouteClient()
    return OpenRouteServiceClient()


def check_health(provider: RoutingProvider | None = None) -> bool:
    """Probe the routing provider with a short route request."""

    try:
        provider = provider or get_routing_provider()
        result = provider.route(list(_HEALTH_PROBE), TravelProfile.CAR)
        return len(result.polyline) >= 2
    except (ValueError, RouteComputationFailed) as exc:
        logger.warning(f"Routing provider health check failed: {exc}")
        return False
