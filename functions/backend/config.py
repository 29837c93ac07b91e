"""
Configuration and settings for the destinations service.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api/v1")

    # Database (Postgres expected)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_model: str = Field(default="gemini-2.5-flash")

    # Scraping
    destination_cache_ttl_days: float = Field(default=30)
    destination_extractor: Literal["ai", "rules"] = Field(default="ai")
    fetch_timeout_seconds: Optional[float] = Field(default=None)

    # Shared secret for the source-URL admin endpoints; unset disables them.
    admin_token: Optional[str] = Field(default=None)

    # Background refresh
    refresh_interval_seconds: float = Field(default=3600)

    # Source pages seeded into the DB on startup when no entry exists yet.
    tech_partners_en: Optional[str] = Field(default=None)
    tech_partners_fi: Optional[str] = Field(default=None)
    health_partners_en: Optional[str] = Field(default=None)
    health_partners_fi: Optional[str] = Field(default=None)
    business_partners_en: Optional[str] = Field(default=None)
    business_partners_fi: Optional[str] = Field(default=None)
    culture_partners_en: Optional[str] = Field(default=None)
    culture_partners_fi: Optional[str] = Field(default=None)

    @property
    def destination_cache_ttl(self) -> timedelta:
        return timedelta(days=self.destination_cache_ttl_days)

    def seed_url_for(self, field: str, lang: str) -> Optional[str]:
        return getattr(self, f"{field}_partners_{lang}", None) or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
