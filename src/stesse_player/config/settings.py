"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Database configuration for the durable key-value store."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/player.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class SoundCloudSettings(BaseModel):
    """SoundCloud API credentials and endpoints."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("client_id", "soundcloud_client_id"),
    )
    client_secret: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("client_secret", "soundcloud_client_secret"),
    )
    api_base: str = "https://api.soundcloud.com"
    token_url: str = "https://api.soundcloud.com/oauth2/token"
    token_skew_seconds: int = Field(default=300, ge=0, le=3600)
    request_timeout_s: float = Field(default=15.0, gt=0.0, le=120.0)
    trusted_hosts: tuple[str, ...] = (
        "api.soundcloud.com",
        "api-v2.soundcloud.com",
        "*.sndcdn.com",
    )

    @field_validator("trusted_hosts", mode="before")
    @classmethod
    def validate_trusted_hosts(cls, v: tuple[str, ...] | list[str] | str) -> tuple[str, ...]:
        """Hosts that may receive the bearer token; ``*.`` matches any subdomain."""
        if isinstance(v, str):
            v = v.split(",")
        return tuple(h.strip().lower() for h in v if h.strip())

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id.get_secret_value() and self.client_secret.get_secret_value())

    def is_trusted_url(self, url: str) -> bool:
        """True for http(s) URLs on the API base host or a ``trusted_hosts`` entry."""
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
        if parts.scheme not in ("http", "https") or not host:
            return False
        if host == (urlsplit(self.api_base).hostname or "").lower():
            return True
        for pattern in self.trusted_hosts:
            if pattern.startswith("*."):
                if host.endswith(pattern[1:]):
                    return True
            elif host == pattern:
                return True
        return False


class ProxySettings(BaseModel):
    """Backend proxy HTTP server configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    host: str = "127.0.0.1"
    port: int = Field(default=3001, ge=1, le=65535)
    public_base_url: str = Field(
        default="http://localhost:3001",
        validation_alias=AliasChoices("public_base_url", "base_url"),
    )
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_origins(cls, v: tuple[str, ...] | list[str] | str) -> tuple[str, ...]:
        """Accept a comma-separated string or a JSON array."""
        if isinstance(v, str):
            return tuple(o.strip() for o in v.split(",") if o.strip())
        if isinstance(v, list):
            return tuple(v)
        return v

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class PlayerSettings(BaseModel):
    """Player core behaviour."""

    model_config = SettingsConfigDict(frozen=True)

    default_volume: float = Field(default=0.7, ge=0.0, le=1.0)
    default_genre: str = "lofi"
    snapshot_interval_seconds: float = Field(default=5.0, gt=0.0)
    restore_settle_seconds: float = Field(default=0.1, ge=0.0, le=5.0)
    max_tracks: int = Field(default=50, ge=1, le=200)
    per_query_limit: int = Field(default=20, ge=1, le=200)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - SOUNDCLOUD__CLIENT_ID, SOUNDCLOUD__CLIENT_SECRET (nested with delimiter)
    - PROXY__PORT, PROXY__PUBLIC_BASE_URL, PROXY__CORS_ORIGINS
    - PLAYER__DEFAULT_VOLUME, PLAYER__SNAPSHOT_INTERVAL_SECONDS, ...
    - DATABASE__URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    soundcloud: SoundCloudSettings = Field(default_factory=SoundCloudSettings)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
