"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_store: bool = False
    intent_timeout_seconds: float = 30.0
    api_ninjas_key: str | None = None
    nutrition_base_url: str = "https://api.api-ninjas.com/v1"
    nutrition_timeout_seconds: float = 15.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def clean_secret(raw: str | None) -> str | None:
    """Return a stripped credential, or None when it is unset or blank."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
