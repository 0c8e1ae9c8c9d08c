"""
Application configuration via environment variables.

Uses Pydantic BaseSettings to load and validate all config from env vars
or a .env.local file. Every setting has a sensible default for local
development so the app can start with minimal configuration.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment selector."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Central configuration for the Hive Inspection Service.

    Values are loaded from environment variables first, falling back
    to a `.env.local` file in the project root. Secrets should NEVER
    be committed.
    """

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    environment: Environment = Environment.DEVELOPMENT

    # ── AI Model Keys ────────────────────────────────────────────
    openai_api_key: str = Field(default="", description="OpenAI API key for transcription and extraction")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    extract_model: str = Field(default="gpt-4o-mini", description="Model used for structured extraction")
    transcription_model: str = Field(default="whisper-1", description="Model used for speech-to-text")
    llm_timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for hosted AI calls")

    # ── Supabase ─────────────────────────────────────────────────
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_service_key: str = Field(default="", description="Supabase service-role key")

    # ── HTTP ─────────────────────────────────────────────────────
    cors_origins: list[str] = Field(
        default=["http://localhost:8080", "http://localhost:5173"],
        description="Browser origins allowed to call the API",
    )
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1, description="Max audio upload size")

    # ── Inspection Defaults ──────────────────────────────────────
    default_frame_count: int = Field(default=10, ge=1, le=40, description="Frame count for new hives")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level")

    # ── Derived helpers ──────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return cached Settings instance.

    Using lru_cache ensures we read env vars exactly once, and every
    module that calls ``get_settings()`` gets the same object.
    """
    return Settings()
