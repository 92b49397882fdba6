"""
CDN Sync Application Configuration

Configuration management with environment variable support.
Implements defaults and validation for all settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Any, Dict
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Registry store
    REGISTRY_BACKEND: str = Field(
        default="redis", description="Host registry backend (redis or memory)"
    )
    REDIS_URL: str = Field(
        default="redis://localhost:6379", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=10.0, gt=0, description="Redis socket connect timeout in seconds"
    )

    # Deployment domains
    DEFAULT_DOMAIN: str = Field(
        default="localhost", description="Canonical default domain of this deployment"
    )
    FUNCTIONS_DOMAIN_SUFFIX: str = Field(
        default=".cloudfunctions.net",
        description="Function-hosting domain suffix that aliases the default domain",
    )

    # Cache header and CDN settings
    CACHE_CONFIG: Dict[str, Any] = Field(
        default_factory=dict,
        description="Cache header overrides (JSON object with max_age / s_max_age)",
    )
    CDN_SCHEME: str = Field(default="https", description="Scheme for CDN calls")
    CDN_PORT: int = Field(default=443, ge=1, le=65535, description="Port for CDN calls")
    HEAT_DELAY_MS: int = Field(
        default=10000, ge=0, description="Default settle window before warming"
    )

    # Observability
    OTEL_SERVICE_NAME: str = Field(default="cdnsync", description="Service name")
    OTEL_SERVICE_VERSION: str = Field(default="0.1.0", description="Service version")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("REGISTRY_BACKEND")
    @classmethod
    def validate_registry_backend(cls, v):
        """Validate registry backend name."""
        allowed = ["redis", "memory"]
        if v.lower() not in allowed:
            raise ValueError(f"REGISTRY_BACKEND must be one of: {allowed}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def heat_delay_seconds(self) -> float:
        """Default heat delay in seconds."""
        return self.HEAT_DELAY_MS / 1000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
