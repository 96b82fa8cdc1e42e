"""tenantkv -- namespaced, failover-tolerant Redis access for multi-tenant apps.

Manifesto:
    A shared Redis serving many tenants needs two guarantees that the plain
    client does not give: one tenant must never see or destroy another
    tenant's keys, and a Redis that is briefly read-only during failover must
    not take request handling down with it.

    - **Namespaced keys:** every key becomes ``"{tenant}:{key}"``
    - **Tenant-scoped bulk ops:** listing, prefix deletion and flushing never
      leave the current namespace
    - **Read-only guard:** ``READONLY`` rejections become no-ops, logged once
      per cooldown window
    - **Full command surface:** unlisted commands are forwarded unmodified

Architecture::

    config/        Settings (pydantic-settings) + YAML connection files
    connection.py  raw_connection() / build_url()
    readonly.py    ReadOnlyState + guard
    namespace.py   Tenant context (contextvars)
    commands.py    Command tables
    client.py      NamespacedRedis proxy + bulk operations
    cache.py       NamespacedCache (JSON values with TTL)
    cli.py         ``tenantkv`` command line

Examples:
    >>> from tenantkv import NamespacedRedis, ReadOnlyState, tenant_scope
    >>> store = NamespacedRedis(read_only_state=ReadOnlyState())
    >>> with tenant_scope("site_a"):
    ...     store.set("greeting", "hello")
    ...     store.get("greeting")
    True
    'hello'
"""

from tenantkv.cache import NamespacedCache
from tenantkv.client import NamespacedRedis
from tenantkv.config import RedisConfig, TenantKVSettings, get_redis_config, get_settings
from tenantkv.connection import build_url, raw_connection
from tenantkv.errors import ConfigError, NamespaceError, TenantKVError
from tenantkv.namespace import (
    clear_tenant,
    current_namespace,
    fixed_namespace,
    get_tenant,
    set_tenant,
    tenant_scope,
)
from tenantkv.readonly import ReadOnlyState, is_read_only_error, shared_read_only_state

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "NamespaceError",
    "NamespacedCache",
    "NamespacedRedis",
    "ReadOnlyState",
    "RedisConfig",
    "TenantKVError",
    "TenantKVSettings",
    "build_url",
    "clear_tenant",
    "current_namespace",
    "fixed_namespace",
    "get_redis_config",
    "get_settings",
    "get_tenant",
    "is_read_only_error",
    "raw_connection",
    "set_tenant",
    "shared_read_only_state",
    "tenant_scope",
]
