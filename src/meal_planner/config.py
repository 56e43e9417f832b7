"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    plan_default_days: int = 7
    plan_max_days: int = 31
    match_tolerance: float = 0.05
    allow_repeat_fallback: bool = True
    generation_timeout_seconds: float | None = None
    food_cache_ttl_seconds: int = 3600

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
