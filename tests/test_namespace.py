"""Tests for tenantkv.namespace: tenant context and namespace resolution."""

from __future__ import annotations

import threading

import pytest

from tenantkv.errors import NamespaceError
from tenantkv.namespace import (
    clear_tenant,
    current_namespace,
    fixed_namespace,
    get_tenant,
    reset_tenant,
    set_default_namespace,
    set_tenant,
    tenant_scope,
    validate_tenant_id,
)


class TestDefaultNamespace:
    def test_falls_back_to_configured_default(self):
        assert get_tenant() is None
        assert current_namespace() == "default"

    def test_default_from_environment(self, monkeypatch):
        from tenantkv.config import clear_settings_cache

        monkeypatch.setenv("TENANTKV_DEFAULT_NAMESPACE", "main")
        clear_settings_cache()
        assert current_namespace() == "main"

    def test_invalid_configured_default_rejected(self, monkeypatch):
        from tenantkv.config import clear_settings_cache

        monkeypatch.setenv("TENANTKV_DEFAULT_NAMESPACE", "a*")
        clear_settings_cache()
        with pytest.raises(NamespaceError, match="reserved character"):
            current_namespace()

    def test_override_default(self):
        set_default_namespace("shared")
        assert current_namespace() == "shared"

    def test_disabled_default_raises(self):
        set_default_namespace(None)
        with pytest.raises(NamespaceError, match="No tenant bound"):
            current_namespace()


class TestTenantScope:
    def test_binds_tenant(self):
        with tenant_scope("site_a") as tenant:
            assert tenant == "site_a"
            assert current_namespace() == "site_a"
        assert get_tenant() is None

    def test_nested_scopes_restore_outer(self):
        with tenant_scope("site_a"):
            with tenant_scope("site_b"):
                assert current_namespace() == "site_b"
            assert current_namespace() == "site_a"

    def test_restored_on_exception(self):
        with pytest.raises(RuntimeError):
            with tenant_scope("site_a"):
                raise RuntimeError("request failed")
        assert get_tenant() is None

    def test_resolved_fresh_on_each_call(self):
        with tenant_scope("site_a"):
            first = current_namespace()
        with tenant_scope("site_b"):
            second = current_namespace()
        assert (first, second) == ("site_a", "site_b")

    def test_threads_do_not_share_tenant(self):
        seen: dict[str, str] = {}
        ready = threading.Barrier(2)

        def worker(tenant: str) -> None:
            with tenant_scope(tenant):
                ready.wait()
                seen[tenant] = current_namespace()

        threads = [threading.Thread(target=worker, args=(t,)) for t in ("site_a", "site_b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert seen == {"site_a": "site_a", "site_b": "site_b"}


class TestSetTenant:
    def test_set_and_reset(self):
        token = set_tenant("site_a")
        assert get_tenant() == "site_a"
        reset_tenant(token)
        assert get_tenant() is None

    def test_clear(self):
        set_tenant("site_a")
        clear_tenant()
        assert get_tenant() is None


class TestValidation:
    @pytest.mark.parametrize("tenant_id", ["site_a", "tenant-42", "Acme.Corp"])
    def test_valid(self, tenant_id):
        assert validate_tenant_id(tenant_id) == tenant_id

    @pytest.mark.parametrize("tenant_id", ["", "a:b", "site*", "site?", "[x]", "a\\", "two words", None])
    def test_invalid(self, tenant_id):
        with pytest.raises(NamespaceError):
            validate_tenant_id(tenant_id)

    def test_set_tenant_validates(self):
        with pytest.raises(NamespaceError):
            set_tenant("bad:tenant")
        assert get_tenant() is None


class TestFixedNamespace:
    def test_ignores_context(self):
        resolve = fixed_namespace("admin")
        with tenant_scope("site_a"):
            assert resolve() == "admin"

    def test_validates(self):
        with pytest.raises(NamespaceError):
            fixed_namespace("a*")
