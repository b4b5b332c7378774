"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="JSONUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Document limits
    max_document_size: int = Field(
        default=2 * 1024 * 1024, gt=0, description="Max document size (bytes)"
    )
    max_document_depth: int = Field(default=64, gt=0, description="Max JSON nesting depth")

    # Style caching
    enable_style_cache: bool = Field(default=True, description="Cache resolved styles")
    style_cache_size: int = Field(default=256, gt=0, description="Style cache max size")
    style_cache_ttl: int | None = Field(
        default=None, gt=0, description="Style cache TTL (seconds), None = no expiry"
    )

    # Request actions
    request_timeout: float = Field(default=30.0, gt=0.0, description="Default request timeout")
    request_breaker_fail_max: int = Field(
        default=5, gt=0, description="Consecutive failures before the breaker opens"
    )
    request_breaker_reset_timeout: int = Field(
        default=30, gt=0, description="Seconds before an open breaker retries"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
