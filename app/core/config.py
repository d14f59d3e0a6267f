"""
Application Configuration

Settings come from the environment (and an optional ``.env`` file) through
Pydantic Settings and are validated once at import time.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings for the Edupress API."""

    # Database (async driver URL, e.g. postgresql+asyncpg://...)
    DATABASE_URL: str

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 30, gt=0)

    # Runtime
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated list of allowed browser origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Public discount validation (token bucket per client IP)
    DISCOUNT_VALIDATE_RATE_PER_MINUTE: int = Field(default=30, gt=0)
    DISCOUNT_VALIDATE_BURST: int = Field(default=10, gt=0)
    # Only honour X-Forwarded-For behind a reverse proxy that overwrites it
    TRUST_PROXY_HEADERS: bool = False
    RATE_LIMIT_MAX_CLIENTS: int = Field(default=10000, gt=0)

    # Default page size of the notification inbox
    NOTIFICATIONS_PAGE_SIZE: int = Field(default=20, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Development mode adds error details to 500 responses."""
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()


settings = get_settings()
