"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from partscout.constants import (
    APP_NAME,
    APP_VERSION,
    DIGIKEY_BASE_URL,
    DIGIKEY_TOKEN_URL,
    TAVILY_SEARCH_URL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = APP_NAME
    app_version: str = APP_VERSION

    # External APIs
    groq_api_key: str = ""
    tavily_api_key: str = ""
    digikey_client_id: str = ""
    digikey_client_secret: str = ""

    # LLM
    reasoning_model: str = "llama-3.1-8b-instant"
    reasoning_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    reasoning_json_mode: bool = True
    reasoning_max_attempts: int = Field(default=3, ge=1, le=10)
    reasoning_cooldown_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    rate_limit_default_wait_seconds: float = Field(default=5.0, ge=0.0, le=300.0)

    # Tavily
    tavily_search_url: str = TAVILY_SEARCH_URL
    search_depth: str = "advanced"
    search_max_queries_per_category: int = Field(default=3, ge=1, le=10)
    search_max_results: int = Field(default=5, ge=1, le=5)

    # DigiKey
    digikey_base_url: str = DIGIKEY_BASE_URL
    digikey_token_url: str = DIGIKEY_TOKEN_URL

    # HTTP
    http_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    _load_env()
    return Settings()


def _load_env() -> None:
    """Force-load .env from repo root with override."""

    repo_root = Path(__file__).resolve().parents[2]
    env_path = repo_root / ".env"
    load_dotenv(env_path, override=True)
