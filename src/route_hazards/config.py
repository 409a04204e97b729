"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RHA_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Hazard Analysis API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # External services
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL for the Nominatim geocoding service.",
    )
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service used as the keyless fallback.",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")
    ors_base_url: str = Field(
        default="https://api.openrouteservice.org/v2",
        description="Base URL for the OpenRouteService directions API.",
    )
    ors_profile: str = Field(default="driving-hgv")
    ors_api_key: Optional[str] = Field(
        default=None,
        description="OpenRouteService key. When unset the primary provider is skipped.",
    )
    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API interpreter endpoint for hazard data.",
    )
    user_agent: str = Field(default="RouteHazardEngine/1.0")

    http_timeout_seconds: float = Field(default=15.0, gt=0.0)
    overpass_timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_parallel_requests: int = Field(default=4, ge=1)
    route_alternatives: int = Field(default=3, ge=1)

    # Analysis policy
    route_buffer_meters: float = Field(default=100.0, gt=0.0)
    step_buffer_meters: float = Field(default=500.0, gt=0.0)
    bbox_margin_degrees: float = Field(default=0.01, ge=0.0)
    unsafe_penalty: float = Field(default=20.0, ge=0.0)
    caution_penalty: float = Field(default=5.0, ge=0.0)
    clearance_caution_margin_m: float = Field(default=0.3, ge=0.0)
    width_caution_margin_m: float = Field(default=0.5, ge=0.0)
    weight_caution_ratio: float = Field(default=0.9, gt=0.0, le=1.0)

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

    @field_validator("ors_api_key", mode="before")
    @classmethod
    def _blank_key_is_unset(cls, value: Any) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


settings = Settings()
