"""Tests for tenantkv.errors module."""

from tenantkv.errors import (
    ConfigError,
    ErrorCategory,
    InvalidConfigError,
    MissingConfigError,
    NamespaceError,
    TenantKVError,
)


class TestTenantKVError:
    def test_default_category(self):
        assert TenantKVError("boom").category == ErrorCategory.INTERNAL

    def test_with_context(self):
        error = TenantKVError("boom").with_context(namespace="site_a")
        assert error.context == {"namespace": "site_a"}

    def test_cause_chained(self):
        cause = ValueError("bad")
        error = TenantKVError("wrapped", cause=cause)
        assert error.__cause__ is cause

    def test_to_dict(self):
        error = NamespaceError("no tenant", context={"op": "get"}, cause=KeyError("x"))
        d = error.to_dict()
        assert d["error_type"] == "NamespaceError"
        assert d["category"] == "NAMESPACE"
        assert d["context"] == {"op": "get"}
        assert "cause" in d

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestConfigErrors:
    def test_missing(self):
        error = MissingConfigError("redis.host")
        assert error.key == "redis.host"
        assert error.message == "Missing required configuration: redis.host"
        assert isinstance(error, ConfigError)

    def test_invalid(self):
        error = InvalidConfigError("port", "abc")
        assert error.value == "abc"
        assert error.category == ErrorCategory.CONFIG
