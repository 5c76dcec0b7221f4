"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import accounts, freights, health, match_requests, trips
from .config import settings
from .errors import ErrorKind, MatchingError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.INVALID_GEOMETRY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROUTE_NOT_READY: status.HTTP_409_CONFLICT,
    ErrorKind.FREIGHT_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorKind.TRIP_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATE_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_PENDING_REQUEST: status.HTTP_409_CONFLICT,
    ErrorKind.ROUTE_COMPUTATION_FAILED: status.HTTP_502_BAD_GATEWAY,
}


async def matching_error_handler(request: Request, exc: MatchingError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "UNHANDLED", "detail": str(exc)},
    )


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(MatchingError, matching_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(trips.router, prefix=settings.api_prefix)
    app.include_router(freights.router, prefix=settings.api_prefix)
    app.include_router(match_requests.router, prefix=settings.api_prefix)
    app.include_router(accounts.router, prefix=settings.api_prefix)
    return app


app = create_app()
