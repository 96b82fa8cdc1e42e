"""
JSON cache on top of a :class:`~tenantkv.client.NamespacedRedis`.

Values are JSON-serialized and stored under ``"{namespace}:{prefix}{key}"``,
so each tenant gets its own cache and :meth:`NamespacedCache.clear` only
removes the current tenant's cache entries. Every operation inherits the
read-only guard of the underlying client: during failover ``set`` and
``delete`` become no-ops and ``get`` keeps working.

Examples:
    >>> cache = store.new_cache_store(default_ttl_seconds=600)
    >>> cache.set("product:123", {"name": "Widget", "price": 9.99})
    >>> cache.get("product:123")
    {'name': 'Widget', 'price': 9.99}

Tags:
    cache, caching, redis, ttl, tenantkv, multi-tenancy

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tenantkv.client import NamespacedRedis

DEFAULT_CACHE_PREFIX = "_CACHE_:"


class NamespacedCache:
    """Tenant-scoped JSON cache with TTL support.

    Attributes:
        prefix: Key prefix separating cache entries from other tenant data.
        default_ttl_seconds: Default TTL for keys (``None`` → no expiry).
    """

    def __init__(
        self,
        redis: NamespacedRedis,
        *,
        prefix: str = DEFAULT_CACHE_PREFIX,
        default_ttl_seconds: int | None = 3600,
    ):
        self._redis = redis
        self.prefix = prefix
        self._default_ttl = default_ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        raw = self._redis.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        serialized = json.dumps(value)

        if ttl:
            self._redis.setex(self._key(key), ttl, serialized)
        else:
            self._redis.set(self._key(key), serialized)

    def delete(self, key: str) -> None:
        """Remove a key from the cache."""
        self._redis.delete(self._key(key))

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        return bool(self._redis.exists(self._key(key)))

    def keys(self) -> list[str]:
        """Cache keys of the current tenant, prefix stripped."""
        keys = self._redis.list_keys(f"{self.prefix}*")
        return [(k.decode() if isinstance(k, bytes) else k)[len(self.prefix) :] for k in keys]

    def clear(self) -> int:
        """Remove the current tenant's cache entries. Other data is kept."""
        return self._redis.delete_keys_with_prefix(self.prefix)


__all__ = ["DEFAULT_CACHE_PREFIX", "NamespacedCache"]
