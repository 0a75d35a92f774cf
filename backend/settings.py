"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.port)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 3001


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the relay listens on",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        description="Port the relay listens on (env PORT)",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the CLI entry points",
    )

    # -------------------------------------------------------------------------
    # HTTP surface
    # -------------------------------------------------------------------------
    cors_allowed_origins: str = Field(
        default="*",
        description="Comma-separated origins allowed to reach the relay",
    )
    dashboard_static_dir: Optional[str] = Field(
        default="public",
        description="Directory served at / (dashboard page); skipped if missing",
    )
    agent_static_dir: Optional[str] = Field(
        default="src",
        description="Directory served at /src (capture bootstrap script); skipped if missing",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse allowed origins into a list."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    # -------------------------------------------------------------------------
    # Relay behaviour
    # -------------------------------------------------------------------------
    max_events_per_session: Optional[int] = Field(
        default=50_000,
        ge=1,
        description="Ring buffer size of each session log; unset keeps every event",
    )
    inactive_session_ttl_seconds: Optional[float] = Field(
        default=3600.0,
        ge=0,
        description="Evict sessions inactive for longer than this; unset keeps them",
    )
    enforce_session_ownership: bool = Field(
        default=True,
        description="Reject user-action from connections that did not join the session",
    )
    notify_session_end: bool = Field(
        default=False,
        description="Multicast session-ended when a session's last producer leaves",
    )
    report_errors: bool = Field(
        default=True,
        description="Unicast relay-error to senders of refused messages",
    )

    # -------------------------------------------------------------------------
    # Channel limits
    # -------------------------------------------------------------------------
    outbound_queue_size: int = Field(
        default=1000,
        ge=1,
        description="Per-connection outbound queue; overflow drops messages",
    )
    max_message_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Inbound frames larger than this are dropped",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is one the logging module knows."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
