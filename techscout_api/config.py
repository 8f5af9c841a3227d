"""Environment configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Mock control (opt-in feature gate for local runs and tests)
    mock_groq: bool = False  # Use canned completions when no API key is set

    # Completion service (Groq, OpenAI-compatible API)
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    completion_timeout_seconds: float = 60.0

    # Prompt construction
    analysis_temperature: float = 0.7
    analysis_max_tokens: int = 4000
    refine_temperature: float = 0.5
    refine_max_tokens: int = 2000
    max_content_chars: int = 8000

    # Uploads and URL fetching
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    fetch_timeout_seconds: float = 15.0
    fetch_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    # Share links
    share_ttl_seconds: int = 7 * 24 * 3600
    max_shared_reports: int = 10000
    public_base_url: str = ""  # Empty: derive from request headers

    # Server configuration
    port: int = 3000
    host: str = "0.0.0.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    environment: Literal["development", "production"] = "development"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def has_groq_key(self) -> bool:
        """Check if a completion API key is configured."""
        return bool(self.groq_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
