"""
Configuration settings for the studysnap generation client.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Provider Selection
    # ========================================
    model_preference: Literal["automatic", "hosted_only"] = Field(
        default="automatic",
        description="'automatic' prefers the local model when available; 'hosted_only' always uses the hosted model",
    )

    # ========================================
    # Hosted Model (OpenAI-compatible chat completions, BYOK)
    # ========================================
    hosted_api_key: str = Field(
        default="",
        description="Bearer API key for the hosted model",
    )
    hosted_model: str = Field(
        default="openai/gpt-oss-20b:free",
        description="Hosted model identifier",
    )
    hosted_endpoint: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat-completions endpoint URL",
    )
    hosted_app_title: str = Field(
        default="StudySnap",
        description="Product name sent in the X-Title header",
    )
    hosted_timeout_seconds: float = Field(
        default=60.0,
        description="HTTP timeout for hosted requests",
    )

    # ─── Pacing ─────────────────────────────────────────────────────────────────
    # Random delay before every hosted call to stay under provider rate limits
    pacing_min_ms: int = Field(
        default=500,
        description="Minimum pre-request delay in milliseconds",
    )
    pacing_max_ms: int = Field(
        default=1000,
        description="Maximum pre-request delay in milliseconds",
    )

    # ========================================
    # Local Model (Ollama)
    # ========================================
    local_model_enabled: bool = Field(
        default=True,
        description="Allow the local model to serve requests when it is reachable",
    )
    local_model: str = Field(
        default="llama3.2",
        description="Ollama model name",
    )
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL",
    )
    ollama_check_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout for the local model availability check",
    )
    ollama_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for a local model chat request",
    )
    ollama_availability_ttl_seconds: float = Field(
        default=30.0,
        description="How long an availability check result is reused",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )

    @property
    def has_hosted_credentials(self) -> bool:
        """Check if a hosted API key is configured."""
        return bool(self.hosted_api_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
