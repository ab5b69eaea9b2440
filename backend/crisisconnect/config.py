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
    database_url: str = "postgresql+asyncpg://localhost:5432/crisisconnect"
    auto_create_db: bool = True

    # API settings
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000"]
    rate_limit_per_minute: int = 300
    rate_limit_enabled: bool = True

    # Realtime
    poll_interval_seconds: int = 10  # Advertised refetch period for clients
    enforce_room_membership: bool = True
    nearby_default_radius_km: float = 10.0

    # Background jobs
    consistency_check_interval_minutes: int = 5

    # Email (SMTP)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    mail_from: str = "noreply@crisisconnect.local"
    mail_from_name: str = "Crisis Connect"

    # SMS (Twilio REST API)
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None
    twilio_base_url: str = "https://api.twilio.com/2010-04-01"

    notification_timeout_seconds: float = 10.0
    app_base_url: str = "http://localhost:3000"

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
