"""Application configuration management."""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables.
    Example: DATABASE_URL, JWT_SECRET_KEY, REDIS_URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development, test, production)"
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    database_url: str = Field(
        default="sqlite+aiosqlite:///./tokenauth.db",
        description="Database connection URL"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:5173"],
        description="CORS allowed origins"
    )

    # JWT settings
    jwt_secret_key: str = Field(
        ...,
        description="Secret used to sign access tokens"
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT algorithm for token signing"
    )

    access_token_expire_minutes: int = Field(
        default=15,
        description="Access token expiration time in minutes"
    )

    refresh_token_expire_days: int = Field(
        default=7,
        description="Refresh token expiration time in days"
    )

    # Security settings
    bcrypt_rounds: int = Field(
        default=10,
        ge=10,
        description="Bcrypt cost factor"
    )

    refresh_cookie_name: str = Field(
        default="refresh_token",
        description="Name of the HttpOnly cookie carrying the refresh token"
    )

    logout_requires_token: bool = Field(
        default=True,
        description="Reject logout requests that carry no refresh token"
    )

    # Rate limiting
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used by the rate limiter"
    )

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable per-IP rate limiting on auth endpoints"
    )

    auth_rate_limit: int = Field(
        default=5,
        description="Requests allowed per window on each auth endpoint"
    )

    auth_rate_window_seconds: int = Field(
        default=60,
        description="Rate limit window length in seconds"
    )

    # Celery settings
    celery_broker_url: str = Field(default="redis://localhost:6379/1")
    celery_result_backend: str = Field(default="redis://localhost:6379/1")

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    log_format: str = Field(
        default="json",
        description="Log format (json or text)"
    )

    log_dir: str = Field(
        default="logs",
        description="Directory for rotating log files"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("JWT_SECRET_KEY must not be empty")
        return value

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh cookie lifetime in seconds."""
        return self.refresh_token_expire_days * 24 * 60 * 60

    @property
    def database_is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Singleton settings instance
    """
    return Settings()
