"""Cached Supabase client for the Supabase-backed store."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the process-wide Supabase client.

    Returns None when ``FM_SUPABASE_URL`` or ``FM_SUPABASE_KEY`` is unset.
    Raises RuntimeError, chained to the underlying error, when the client
    cannot be built from the configured values (bad URL, malformed key).
    Creating the client does not contact the server.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        raise RuntimeError(f"Supabase client could not be created: {e}") from e
