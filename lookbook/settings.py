"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_async_database_url() -> str:
    """Get database URL converted for asyncpg driver."""
    url = os.environ.get("DATABASE_URL", "") or settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (Postgres in production, SQLite for local dev)
    database_url: str = "sqlite+aiosqlite:///./lookbook.db"

    # Redis (optional)
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = False  # Disable Redis by default for dev

    # JWT
    jwt_secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Analytics ingestion
    track_rate_limit_requests: int = 100
    track_rate_limit_window_seconds: int = 60
    analytics_cache_ttl_seconds: int = 300
    analytics_default_time_range: str = "30d"
    analytics_max_days: int = 365

    # Client IP. Forwarded headers are honored only behind our own proxies;
    # the outermost one wrote the X-Forwarded-For entry `trusted_proxy_hops`
    # positions from the right.
    trust_proxy_headers: bool = False
    trusted_proxy_hops: int = 1

    # Store X-Event-Type tagged public GETs as analytics events
    log_read_events: bool = True

    # Affiliate redirect
    redirect_countdown_seconds: int = 3
    utm_source: str = "lookbook_mimi"
    utm_medium: str = "affiliate"
    utm_campaign: str = "product_redirect"
    tracking_ref: str = "lookbook"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Split the comma-separated CORS origins setting."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
