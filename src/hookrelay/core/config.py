"""
Configuration management for hookrelay.

Uses Pydantic Settings for environment variable validation and type safety.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayConfig(BaseSettings):
    """Outbound webhook delivery configuration."""

    operator_webhook_url: Optional[str] = Field(
        default=None,
        description="Operator webhook that receives a copy of every submission",
    )
    timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Outbound webhook request timeout in seconds",
    )
    user_agent: str = Field(
        default="hookrelay/0.3",
        description="User-Agent header sent with webhook requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="RELAY_", env_file=".env", extra="ignore"
    )


class ThrottleConfig(BaseSettings):
    """Per-client submission cooldown configuration."""

    cooldown_seconds: float = Field(
        default=25.0,
        gt=0.0,
        description="Minimum interval between accepted submissions per client",
    )
    retention_seconds: float = Field(
        default=3600.0,
        gt=0.0,
        description="Entries idle for longer than this are swept",
    )
    sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Minimum time between inline sweeps",
    )

    @model_validator(mode="after")
    def validate_retention(self) -> "ThrottleConfig":
        """A sweep must never evict a client that is still cooling down."""
        if self.retention_seconds < self.cooldown_seconds:
            raise ValueError("retention_seconds must be >= cooldown_seconds")
        return self

    model_config = SettingsConfigDict(
        env_prefix="THROTTLE_", env_file=".env", extra="ignore"
    )


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(
        default=5000,
        ge=0,
        le=65535,
        description="First port to try when starting the server",
    )
    port_search_attempts: int = Field(
        default=10,
        ge=1,
        description="How many consecutive ports to try before picking a random one",
    )
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload")
    trust_forwarded_for: bool = Field(
        default=False,
        description="Key the throttle on X-Forwarded-For (behind a reverse proxy)",
    )
    public_base_url: Optional[str] = Field(
        default=None,
        description="Base URL used for relay page links when no Origin header is sent",
    )

    model_config = SettingsConfigDict(
        env_prefix="API_", env_file=".env", extra="ignore"
    )


class AppConfig(BaseSettings):
    """Main application configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    app_title: str = Field(
        default="Webhook Relay",
        description="Title shown on the HTML pages",
    )

    # Nested configurations
    relay: RelayConfig = Field(default_factory=RelayConfig)
    throttle: ThrottleConfig = Field(default_factory=ThrottleConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Lazily loads configuration on first access.

    Returns:
        AppConfig: The global configuration instance
    """
    global _config
    if _config is None:
        _config = AppConfig(
            relay=RelayConfig(),
            throttle=ThrottleConfig(),
            server=ServerConfig(),
        )
    return _config


def reload_config() -> AppConfig:
    """
    Reload configuration from environment variables.

    Useful for testing or when environment changes.

    Returns:
        AppConfig: The reloaded configuration instance
    """
    global _config
    _config = None
    return get_config()
