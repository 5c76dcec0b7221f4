"""Routing provider clients."""

from .base import RouteResult, RoutingProvider
from .ors_client import OpenRouteServiceClient
from .osrm_client import OSRMRouteClient, decode_polyline
from .provider import check_health, get_routing_provider

__all__ = [
    "RouteResult",
    "RoutingProvider",
    "OpenRouteServiceClient",
    "OSRMRouteClient",
    "decode_polyline",
    "check_health",
    "get_routing_provider",
]
