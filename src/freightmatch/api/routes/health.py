"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Check routing provider health."""
    from ...services.routing import check_health

    try:
        return {"service": settings.routing_provider, "healthy": check_health()}
    except Exception as e:
        return {"service": settings.routing_provider, "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection status."""
    from ...db.supabase import get_supabase_client

    if settings.store_backend == "memory":
        return {"configured": True, "backend": "memory", "connected": True}

    try:
        supabase = get_supabase_client()
    except RuntimeError as exc:
        return {"configured": False, "backend": "supabase", "error": str(exc)}
    if not supabase:
        return {
            "configured": False,
            "backend": "supabase",
            "message": "Supabase not configured. Set FM_SUPABASE_URL and FM_SUPABASE_KEY environment variables.",
        }
    try:
        supabase.table("freight").select("id", count="exact").limit(1).execute()
        return {"configured": True, "backend": "supabase", "connected": True}
    except Exception as exc:
        return {
            "configured": True,
            "backend": "supabase",
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
