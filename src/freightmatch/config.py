"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Freight Corridor Matching API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied by create_app().")

    routing_provider: Literal["openrouteservice", "osrm"] = Field(
        default="openrouteservice",
        description="External routing provider used to compute trip geometry.",
    )
    ors_base_url: str = Field(
        default="https://api.openrouteservice.org",
        description="Base URL for the openrouteservice API.",
    )
    ors_api_key: Optional[str] = Field(default=None, description="openrouteservice API key.")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    default_profile: Literal["driving-car", "driving-hgv"] = Field(
        default="driving-car",
        description="Routing profile used when a trip does not specify one.",
    )
    routing_timeout_seconds: float = Field(default=15.0, gt=0.0)
    routing_max_retries: int = Field(default=2, ge=0)
    routing_backoff_seconds: float = Field(default=1.0, ge=0.0)

    default_corridor_radius_m: float = Field(default=50_000.0, gt=0.0)
    default_match_limit: int = Field(default=50, ge=1)
    max_match_limit: int = Field(default=200, ge=1)
    default_list_limit: int = Field(default=100, ge=1, description="Rows returned by trip and freight listings.")
    candidate_cap: int = Field(default=500, ge=1)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    store_backend: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Persistence backend for freights, trips and match requests.",
    )
    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
