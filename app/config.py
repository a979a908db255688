"""
CareMatch - Configuration Module
Loads environment variables and provides app-wide settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "CareMatch API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database (candidate pool, assignments, facility preferences)
    database_url: str = "sqlite:///./carematch.db"

    # API Settings
    api_prefix: str = "/api/v1"

    # CORS
    cors_origins: str = "*"  # Comma-separated list in production

    # Matching defaults (used when neither the facility nor the request overrides them)
    matching_minimum_score: float = 60
    matching_max_candidates: int = 10
    matching_max_distance_km: float = 50

    # Scoring fans out to a thread pool above this pool size
    matching_parallel_threshold: int = 32
    matching_max_workers: int = 4


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every request.
    """
    return Settings()
