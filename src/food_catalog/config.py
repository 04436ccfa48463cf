"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    off_base_url: str = "https://world.openfoodfacts.org"
    off_user_agent: str = "food-catalog/0.1 (https://github.com/food-catalog)"
    off_timeout_seconds: float = 10
    off_max_retries: int = 3
    off_retry_delay_seconds: float = 0.3
    cache_threshold: int = 5
    max_external_results: int = 10
    local_page_size: int = 20
    cache_retention_days: int = 30
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
