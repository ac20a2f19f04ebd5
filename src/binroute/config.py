"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BINROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Bin Collection Routing API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for route run outputs.")
    default_start_latitude: float = Field(
        default=28.6139,
        ge=-90.0,
        le=90.0,
        description="Latitude used when a route request has no start location (New Delhi).",
    )
    default_start_longitude: float = Field(
        default=77.2090,
        ge=-180.0,
        le=180.0,
        description="Longitude used when a route request has no start location (New Delhi).",
    )
    average_speed_kmh: float = Field(default=20.0, gt=0.0, description="Assumed city driving speed.")
    service_minutes_per_stop: float = Field(default=5.0, ge=0.0, description="Time spent emptying one bin.")
    collection_frequency_days: int = Field(default=7, ge=1)
    use_demo_data: bool = Field(
        default=True,
        description="Seed the in-memory fallback store with demo bins and collectors.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
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

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

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
