"""
Tenant namespace resolution.

The active tenant lives in a :class:`~contextvars.ContextVar`, so it is
isolated per thread and per asyncio task. Wrappers never cache it: the
namespace is resolved on every command because one worker serves many
tenants over its lifetime.

Bind a tenant for the duration of a request with :func:`tenant_scope`::

    with tenant_scope("site_a"):
        store.set("foo", "bar")        # writes "site_a:foo"

The previous binding is restored on exit, even when the block raises, so a
reused worker thread never leaks one tenant's identity into the next request.

Tags:
    tenantkv, multi-tenancy, contextvars, namespace

Doc-Types:
    api-reference
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Protocol

from tenantkv.errors import NamespaceError
from tenantkv.logging import bind_context, unbind_context

# Separator, glob metacharacters and the glob escape character would let one
# tenant's key patterns match another tenant's keys.
_INVALID_CHARS = re.compile(r"[:*?\[\]\\\s]")

_current_tenant: ContextVar[str | None] = ContextVar("tenantkv_tenant", default=None)  # noqa: B039

_UNSET = object()
_default_namespace: object = _UNSET


class NamespaceResolver(Protocol):
    """Anything that returns the namespace to use for the next command."""

    def __call__(self) -> str: ...


def validate_tenant_id(tenant_id: str) -> str:
    """Return *tenant_id* if it can be used as a key prefix, else raise."""
    if not isinstance(tenant_id, str) or not tenant_id:
        raise NamespaceError(f"Tenant id must be a non-empty string, got {tenant_id!r}")
    if _INVALID_CHARS.search(tenant_id):
        raise NamespaceError(
            f"Tenant id {tenant_id!r} contains a reserved character",
            context={"tenant_id": tenant_id},
        )
    return tenant_id


def get_tenant() -> str | None:
    """The tenant bound in the current context, if any."""
    return _current_tenant.get()


def set_tenant(tenant_id: str) -> Token[str | None]:
    """Bind *tenant_id* to the current context. Keep the token to restore."""
    return _current_tenant.set(validate_tenant_id(tenant_id))


def reset_tenant(token: Token[str | None]) -> None:
    """Restore the binding that was active before :func:`set_tenant`."""
    _current_tenant.reset(token)


def clear_tenant() -> None:
    """Unbind any tenant from the current context."""
    _current_tenant.set(None)


@contextmanager
def tenant_scope(tenant_id: str) -> Iterator[str]:
    """Bind *tenant_id* for the duration of the ``with`` block."""
    token = set_tenant(tenant_id)
    bind_context(tenant=tenant_id)
    try:
        yield tenant_id
    finally:
        reset_tenant(token)
        previous = _current_tenant.get()
        if previous is None:
            unbind_context("tenant")
        else:
            bind_context(tenant=previous)


def set_default_namespace(namespace: str | None) -> None:
    """Override the fallback used when no tenant is bound.

    ``None`` disables the fallback: resolving without a bound tenant raises.
    """
    global _default_namespace
    _default_namespace = validate_tenant_id(namespace) if namespace is not None else None


def reset_default_namespace() -> None:
    """Go back to the configured ``default_namespace`` setting."""
    global _default_namespace
    _default_namespace = _UNSET


def _fallback_namespace() -> str | None:
    if _default_namespace is _UNSET:
        from tenantkv.config import get_settings

        default = get_settings().default_namespace
        return validate_tenant_id(default) if default is not None else None
    return _default_namespace  # type: ignore[return-value]


def current_namespace() -> str:
    """Resolve the namespace for the next command.

    Raises:
        NamespaceError: No tenant is bound and the default namespace is disabled.
    """
    tenant = _current_tenant.get()
    if tenant is not None:
        return tenant
    fallback = _fallback_namespace()
    if fallback is None:
        raise NamespaceError("No tenant bound to the current context")
    return fallback


def fixed_namespace(namespace: str) -> NamespaceResolver:
    """A resolver that always returns *namespace* (scripts, admin tools)."""
    validate_tenant_id(namespace)

    def resolve() -> str:
        return namespace

    return resolve


__all__ = [
    "NamespaceResolver",
    "clear_tenant",
    "current_namespace",
    "fixed_namespace",
    "get_tenant",
    "reset_default_namespace",
    "reset_tenant",
    "set_default_namespace",
    "set_tenant",
    "tenant_scope",
    "validate_tenant_id",
]
