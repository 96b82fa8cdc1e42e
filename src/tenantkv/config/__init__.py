"""Configuration: environment-driven settings and YAML connection files."""

from tenantkv.config.loader import get_redis_config, load_redis_config
from tenantkv.config.settings import (
    RedisConfig,
    TenantKVSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "RedisConfig",
    "TenantKVSettings",
    "clear_settings_cache",
    "get_redis_config",
    "get_settings",
    "load_redis_config",
]
