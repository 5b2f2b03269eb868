"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/carelink"

    # Identity provider tokens (HS256 JWT secret shared with the provider)
    auth_jwt_secret: str = "change-me"
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: str | None = "authenticated"
    auth_access_cookie_name: str = "access_token"

    # Duplicate detection
    dedup_window_seconds: int = 120
    dedup_coordinate_precision: int = 3  # ~111 m

    # Emergency store
    bulk_delete_chunk_size: int = 50

    # Realtime
    change_watch_interval_seconds: int = 15

    # SMS relay (delivery is delegated; unset means log only)
    sms_relay_url: str | None = None
    ambulance_dispatch_number: str | None = None

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    rate_limit_per_minute: int = 30

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
