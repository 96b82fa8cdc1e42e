"""Tests for tenantkv.cache: NamespacedCache on top of NamespacedRedis."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from tenantkv.cache import DEFAULT_CACHE_PREFIX, NamespacedCache
from tenantkv.namespace import tenant_scope


@pytest.fixture
def cache(store):
    return NamespacedCache(store, default_ttl_seconds=3600)


class TestNamespacedCache:
    def test_set_uses_default_ttl(self, cache, fake_redis):
        with tenant_scope("site_a"):
            cache.set("product:1", {"name": "Widget"})
        key = f"site_a:{DEFAULT_CACHE_PREFIX}product:1"
        assert fake_redis.data[key] == json.dumps({"name": "Widget"})
        assert fake_redis.ttls[key] == 3600

    def test_set_with_explicit_ttl(self, cache, fake_redis):
        with tenant_scope("site_a"):
            cache.set("k", "v", ttl_seconds=60)
        assert fake_redis.ttls[f"site_a:{DEFAULT_CACHE_PREFIX}k"] == 60

    def test_set_without_ttl(self, store, fake_redis):
        cache = NamespacedCache(store, default_ttl_seconds=None)
        with tenant_scope("site_a"):
            cache.set("k", [1, 2])
        assert f"site_a:{DEFAULT_CACHE_PREFIX}k" not in fake_redis.ttls

    def test_get_round_trip(self, cache):
        with tenant_scope("site_a"):
            cache.set("k", {"v": 1})
            assert cache.get("k") == {"v": 1}

    def test_get_missing(self, cache):
        with tenant_scope("site_a"):
            assert cache.get("missing") is None

    def test_per_tenant(self, cache):
        with tenant_scope("site_a"):
            cache.set("k", "a")
        with tenant_scope("site_b"):
            assert cache.get("k") is None
            assert cache.exists("k") is False

    def test_delete_and_exists(self, cache):
        with tenant_scope("site_a"):
            cache.set("k", "v")
            assert cache.exists("k") is True
            cache.delete("k")
            assert cache.exists("k") is False

    def test_keys(self, cache):
        with tenant_scope("site_a"):
            cache.set("a", 1)
            cache.set("b", 2)
            assert sorted(cache.keys()) == ["a", "b"]

    def test_keys_decoded_when_client_returns_bytes(self):
        redis = MagicMock()
        redis.list_keys.return_value = [b"_CACHE_:a", b"_CACHE_:b"]
        assert NamespacedCache(redis).keys() == ["a", "b"]
        redis.list_keys.assert_called_once_with("_CACHE_:*")

    def test_clear_keeps_other_data(self, cache, store):
        with tenant_scope("site_a"):
            store.set("session", "s")
            cache.set("a", 1)
            assert cache.clear() == 1
            assert store.list_keys() == ["session"]

    def test_clear_keeps_other_tenants(self, cache):
        with tenant_scope("site_b"):
            cache.set("a", 1)
        with tenant_scope("site_a"):
            cache.clear()
        with tenant_scope("site_b"):
            assert cache.get("a") == 1

    def test_set_during_failover_is_noop(self, cache, fake_redis):
        fake_redis.read_only = True
        with tenant_scope("site_a"):
            cache.set("k", "v")
            assert cache.get("k") is None
