"""Shared HTTP plumbing for routing provider clients."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

import httpx

from ...config import settings
from ...errors import RouteComputationFailed
from ...models.domain import LatLng, TravelProfile

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(slots=True)
class RouteResult:
    polyline: List[LatLng] = field(default_factory=list)
    distance_m: Optional[int] = None
    duration_s: Optional[int] = None


class RoutingProvider(Protocol):
    def route(self, coordinates: Sequence[LatLng], profile: TravelProfile) -> RouteResult:
        ...


class HTTPRoutingClient:
    """Base client: per-call httpx client, explicit timeout, retries with backoff."""

    provider_name = "routing"

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.routing_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.routing_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            transport=self._transport,
        )

    def _send(self, method: str, url: str, **kwargs) -> dict:
        """Send a request and return its JSON body, retrying transient failures."""

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(method, url, **kwargs)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    status_code = exc.response.status_code
                    if status_code not in RETRYABLE_STATUS_CODES:
                        raise RouteComputationFailed(
                            f"{self.provider_name} rejected the route request "
                            f"(HTTP {status_code}): {exc.response.text[:500]}"
                        ) from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RouteComputationFailed(
                            f"{self.provider_name} failed after {attempt} attempts (HTTP {status_code})."
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.warning(
                        f"{self.provider_name} returned HTTP {status_code}, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                except httpx.TransportError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RouteComputationFailed(
                            f"Failed to reach {self.provider_name} at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"{self.provider_name} network error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    time.sleep(wait_time)
                except ValueError as exc:
                    raise RouteComputationFailed(f"{self.provider_name} returned invalid JSON: {exc}") from exc
        finally:
            client.close()


def require_waypoints(coordinates: Sequence[LatLng]) -> None:
    if len(coordinates) < 2:
        raise RouteComputationFailed("At least two coordinates are required to compute a route.")
