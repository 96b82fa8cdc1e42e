"""
Connection factory for raw Redis clients.

Builds a ``redis.Redis`` handle (with its own connection pool) or a
``redis://`` URL from a :class:`~tenantkv.config.RedisConfig`. There is no
retry logic here: connection failures surface as ``redis.ConnectionError``
on first use and propagate to the caller.

Examples:
    >>> from tenantkv.config import RedisConfig
    >>> build_url(RedisConfig(host="cache", port=6380, db=2))
    'redis://cache:6380/2'
    >>> build_url(RedisConfig(host="cache", password="s3cret"))
    'redis://:s3cret@cache:6379/0'

Tags:
    tenantkv, redis, connection, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import redis

from tenantkv.config import RedisConfig, get_redis_config


def raw_connection(config: RedisConfig | None = None) -> redis.Redis:
    """Create a raw Redis client for *config* (global config when omitted)."""
    config = config or get_redis_config()

    redis_opts: dict[str, Any] = {
        "host": config.host,
        "port": config.port,
        "db": config.db,
        "decode_responses": config.decode_responses,
    }
    if config.password:
        redis_opts["password"] = config.password
    if config.socket_timeout is not None:
        redis_opts["socket_timeout"] = config.socket_timeout

    return redis.Redis(**redis_opts)


def build_url(config: RedisConfig | None = None) -> str:
    """Return the ``redis://`` URL for *config* (global config when omitted)."""
    config = config or get_redis_config()
    auth = f":{quote(config.password, safe='')}@" if config.password else ""
    return f"redis://{auth}{config.host}:{config.port}/{config.db}"


__all__ = ["raw_connection", "build_url"]
