"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str = ""
    supabase_anon_key: str = ""
    storage_bucket: str = "sale_photos"
    signed_url_expires_in: int = 3600
    password_reset_redirect_url: str | None = None
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def missing_connection_settings(settings: Settings) -> list[str]:
    """Return the names of required Supabase settings that are empty."""
    missing = []
    if not settings.supabase_url.strip():
        missing.append("SUPABASE_URL")
    if not settings.supabase_anon_key.strip():
        missing.append("SUPABASE_ANON_KEY")
    return missing
