"""
Centralized settings for tenantkv.

:class:`TenantKVSettings` is the single validated, cached source of truth for
the Redis connection record, the default namespace and logging options. All
fields can be set via ``TENANTKV_*`` environment variables (e.g.
``TENANTKV_REDIS_HOST=redis.internal``) or a ``.env`` file.

:class:`RedisConfig` is the immutable connection record consumed by
:mod:`tenantkv.connection`.

Tags:
    tenantkv, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisConfig(BaseModel):
    """Connection record for one Redis endpoint. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None
    socket_timeout: float | None = None
    decode_responses: bool = True

    @field_validator("password", mode="before")
    @classmethod
    def _empty_password_is_none(cls, value: object) -> object:
        if value == "":
            return None
        return value

    @field_validator("port")
    @classmethod
    def _port_in_range(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"port out of range: {value}")
        return value


class TenantKVSettings(BaseSettings):
    """tenantkv centralized configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TENANTKV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Redis ────────────────────────────────────────────────────
    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379)
    redis_db: int = Field(default=0)
    redis_password: str | None = Field(default=None)
    redis_socket_timeout: float | None = Field(default=None)
    redis_decode_responses: bool = Field(default=True)
    redis_config_file: str | None = Field(
        default=None,
        description="YAML file with one Redis section per environment",
    )
    environment: str = Field(default="development")

    # ── Namespacing ──────────────────────────────────────────────
    default_namespace: str | None = Field(
        default="default",
        description="Namespace used when no tenant is bound (None disables the fallback)",
    )

    # ── Read-only handling ───────────────────────────────────────
    read_only_cooldown_seconds: float = Field(default=15.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console", "auto"] = Field(default="json")

    def redis_config(self) -> RedisConfig:
        """Build the connection record from the ``redis_*`` fields."""
        return RedisConfig(
            host=self.redis_host,
            port=self.redis_port,
            db=self.redis_db,
            password=self.redis_password,
            socket_timeout=self.redis_socket_timeout,
            decode_responses=self.redis_decode_responses,
        )


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TenantKVSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TenantKVSettings:
    """Load, validate, and cache a :class:`TenantKVSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = TenantKVSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
