"""
YAML connection-file loading.

A Redis connection file holds one section per environment::

    development:
      host: localhost
      port: 6379
      db: 0

    production:
      host: ${REDIS_HOST}
      port: 6379
      db: 2
      password: ${REDIS_PASSWORD}

``$VAR`` / ``${VAR}`` references are expanded from the process environment
before parsing. Unset variables are left as-is.

Tags:
    tenantkv, configuration, yaml, loader

Doc-Types:
    api-reference
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from tenantkv.config.settings import RedisConfig, TenantKVSettings, get_settings
from tenantkv.errors import ConfigError, InvalidConfigError, MissingConfigError
from tenantkv.logging import get_logger

logger = get_logger(__name__)


def load_redis_config(path: str | Path, environment: str) -> RedisConfig:
    """Read the *environment* section of a YAML connection file.

    Raises:
        MissingConfigError: File or environment section not found.
        InvalidConfigError: YAML is malformed or values fail validation.
    """
    path = Path(path)

    if not path.exists():
        raise MissingConfigError(str(path), f"Redis config file not found: {path}")

    logger.debug("config.load_yaml", path=str(path), environment=environment)

    text = os.path.expandvars(path.read_text(encoding="utf-8"))
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidConfigError(str(path), None, f"Invalid YAML in {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise InvalidConfigError(
            str(path), data, f"Expected a mapping of environments in {path}, got {type(data).__name__}"
        )

    section = data.get(environment)
    if section is None:
        raise MissingConfigError(
            environment,
            f"No Redis config for environment {environment!r} in {path}",
        )
    if not isinstance(section, dict):
        raise InvalidConfigError(environment, section)

    try:
        return RedisConfig(**section)
    except ValidationError as e:
        raise InvalidConfigError(environment, section, f"Invalid Redis config in {path}: {e}", cause=e) from e


def get_redis_config(settings: TenantKVSettings | None = None) -> RedisConfig:
    """Resolve the process-wide connection record.

    Uses ``redis_config_file`` when it is set, otherwise the ``redis_*``
    settings fields.
    """
    settings = settings or get_settings()
    if settings.redis_config_file:
        return load_redis_config(settings.redis_config_file, settings.environment)
    try:
        return settings.redis_config()
    except ValidationError as e:
        raise ConfigError(f"Invalid Redis settings: {e}", cause=e) from e
