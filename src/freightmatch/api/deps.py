"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import HTTPException, status

from ..config import settings
from ..db.supabase import get_supabase_client
from ..persistence.store import InMemoryStore, MarketplaceStore
from ..services.routing import RoutingProvider, get_routing_provider

logger = logging.getLogger(__name__)


@lru_cache()
def get_store() -> MarketplaceStore:
    """Return the process-wide store selected by ``settings.store_backend``."""
    if settings.store_backend == "supabase":
        client = get_supabase_client()
        if client is None:
            raise RuntimeError("store_backend is 'supabase' but FM_SUPABASE_URL or FM_SUPABASE_KEY is not set.")
        from ..persistence.supabase_store import SupabaseStore

        return SupabaseStore(client)
    logger.info("Using in-memory marketplace store")
    return InMemoryStore()


def get_routing() -> RoutingProvider:
    try:
        return get_routing_provider()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Routing provider is not configured: {exc}",
        ) from exc
