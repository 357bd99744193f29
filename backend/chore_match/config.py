"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All tunables come from environment variables or .env (never hardcoded in modules)
    - get_settings() is cached (lru_cache) — single instance per process
    - session_ttl_seconds=None means tokens never expire

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: works out-of-the-box for local development
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Proximity
    proximity_radius_km: float = Field(10.0, gt=0)
    max_query_radius_km: float = Field(100.0, gt=0)
    distance_formula: Literal["haversine", "equirectangular"] = "haversine"

    # Sessions & credentials
    session_ttl_seconds: int | None = Field(None, gt=0)
    session_sweep_interval_seconds: int = Field(60, gt=0)
    password_hash_iterations: int = Field(390_000, ge=1)

    @field_validator("session_ttl_seconds", mode="before")
    @classmethod
    def blank_ttl_means_never(cls, v):
        """SESSION_TTL_SECONDS='' or '0' keeps the no-expiry behaviour."""
        if v in ("", "0", 0):
            return None
        return v

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = Field(60, gt=0)
    rate_limit_max_requests: int = Field(100, gt=0)
    rate_limit_cleanup_interval_seconds: int = Field(60, gt=0)

    # API
    cors_origins: list[str] = ["http://localhost:3000"]
    static_dir: str = "public"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
