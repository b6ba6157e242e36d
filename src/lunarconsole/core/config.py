"""Configuration management for the LunarBase console.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once at
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Console configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LUNARCONSOLE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "LunarBase Console"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"

    # Backend API Settings
    api_base_url: str = "http://localhost:3000/api"
    api_token: str | None = Field(
        default=None,
        description="Bearer token sent with every backend request",
    )
    request_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 30.0

    # Cache Settings
    cache_ttl_seconds: float = 300.0  # 5 minutes
    default_page_size: int = 20

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so endpoint paths can be appended."""
        return v.rstrip("/")

    @field_validator("cache_ttl_seconds", "request_timeout_seconds", "upload_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Durations must be positive")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached console settings instance.
    """
    return Settings()
