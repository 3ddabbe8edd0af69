"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float | None = 0.0
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    off_base_url: str = "https://world.openfoodfacts.org"
    off_page_size: int = 5
    storage_backend: Literal["local", "supabase"] = "local"
    local_store_path: str = ".know_your_bite/store.json"
    supabase_url: str | None = None
    supabase_key: str | None = None
    profile_sync_delay_seconds: float = 2.0
    profile_sync_max_attempts: int = 3
    history_limit: int = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def is_ai_configured(self) -> bool:
        """Return True when a model credential is present."""
        return bool(self.openai_api_key and self.openai_api_key.strip())
