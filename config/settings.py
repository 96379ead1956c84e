"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    QUESTIONS_PER_TIER: int = Field(default=6, ge=1)
    SELECTED_PER_TIER: int = Field(default=2, ge=1)

    MAX_AUDIO_BYTES: int = 25 * 1024 * 1024
    TTS_CHUNK_CHARS: int = Field(default=500, ge=1)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
