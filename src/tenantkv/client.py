"""
Namespaced, read-only-aware Redis client.

:class:`NamespacedRedis` wraps a raw ``redis.Redis`` handle so that many
tenants can share one Redis database:

- every key is stored as ``"{namespace}:{key}"`` where the namespace is the
  tenant bound to the current context (see :mod:`tenantkv.namespace`),
- every command runs through the read-only guard, so a failing-over Redis
  turns writes into silent no-ops instead of crashing request handling,
- bulk operations (key listing, prefix deletion, flushing) are scoped to the
  current namespace and never touch other tenants' data.

Architecture:
    ::

        caller ──▶ NamespacedRedis.<command>(key, ...)
                      │  namespace resolver  → "site_a"
                      │  key rewrite         → "site_a:key"
                      ▼
                   ReadOnlyState.ignore_read_only(command, namespace)
                      │  raw.<command>("site_a:key", ...)
                      ▼
                   redis.Redis ──▶ Redis server

Command coverage:
    - ``KEYED_COMMANDS`` (:mod:`tenantkv.commands`): key (first argument,
      or ``name=``/``key=``) gets prefixed. Generated methods.
    - Multi-key commands (``mget``, ``mset``, ``rename``, ``sinter``, ...):
      implemented below, every key argument is prefixed.
    - Anything else the raw client supports is forwarded unmodified (still
      guarded). Keys passed that way are NOT namespaced.

Examples:
    >>> from tenantkv import NamespacedRedis, tenant_scope
    >>> store = NamespacedRedis()
    >>> with tenant_scope("site_a"):
    ...     store.set("foo", "bar")
    ...     store.list_keys()
    True
    ['foo']

Tags:
    tenantkv, redis, multi-tenancy, proxy, read-only, failover

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

import redis

from tenantkv.commands import GLOBAL_FLUSH_COMMANDS, KEYED_COMMANDS, MULTI_KEY_COMMANDS
from tenantkv.config import RedisConfig, get_redis_config
from tenantkv.connection import build_url, raw_connection
from tenantkv.logging import get_logger
from tenantkv.namespace import NamespaceResolver, current_namespace
from tenantkv.readonly import ReadOnlyState, shared_read_only_state

if TYPE_CHECKING:
    from tenantkv.cache import NamespacedCache

logger = get_logger(__name__)

KeyT = str | bytes

# Redis command names that map to a differently named method here.
_COMMAND_ALIASES = {"del": "delete", "keys": "list_keys"}


def _list_or_args(keys: KeyT | Iterable[KeyT], args: tuple[Any, ...]) -> list[KeyT]:
    """Accept ``f(["a", "b"])`` as well as ``f("a", "b")``, like redis-py."""
    if isinstance(keys, (str, bytes)):
        result = [keys]
    else:
        result = list(keys)
    result.extend(args)
    return result


class NamespacedRedis:
    """Redis client that namespaces keys with the current tenant.

    Args:
        config: Connection record. Defaults to the global configuration.
        client: Pre-built raw client. Defaults to ``raw_connection(config)``.
        read_only_state: Shared read-only tracker. Defaults to the process-wide
            instance from :func:`~tenantkv.readonly.shared_read_only_state`.
        namespace: Resolver returning the namespace for each command.
            Defaults to :func:`~tenantkv.namespace.current_namespace`.
    """

    def __init__(
        self,
        config: RedisConfig | None = None,
        *,
        client: redis.Redis | None = None,
        read_only_state: ReadOnlyState | None = None,
        namespace: NamespaceResolver | None = None,
    ) -> None:
        self.config = config if config is not None else get_redis_config()
        self._redis = client if client is not None else raw_connection(self.config)
        self._read_only = read_only_state if read_only_state is not None else shared_read_only_state()
        self._resolve_namespace: Callable[[], str] = namespace or current_namespace

    # ── Introspection ────────────────────────────────────────────

    @property
    def namespace(self) -> str:
        """Namespace the next command will use."""
        return self._resolve_namespace()

    @property
    def read_only_state(self) -> ReadOnlyState:
        return self._read_only

    @property
    def url(self) -> str:
        return build_url(self.config)

    def without_namespace(self) -> redis.Redis:
        """The raw client. Only for data intentionally shared between tenants."""
        return self._redis

    # ── Key rewriting ────────────────────────────────────────────

    def _namespaced(self, key: KeyT, namespace: str | None = None) -> KeyT:
        namespace = namespace if namespace is not None else self._resolve_namespace()
        if isinstance(key, bytes):
            return namespace.encode() + b":" + key
        return f"{namespace}:{key}"

    def _namespaced_all(self, keys: Iterable[KeyT]) -> list[KeyT]:
        namespace = self._resolve_namespace()
        return [self._namespaced(k, namespace) for k in keys]

    @staticmethod
    def _strip_namespace(key: KeyT, namespace: str) -> KeyT:
        if isinstance(key, bytes):
            return key[len(namespace.encode()) + 1 :]
        return key[len(namespace) + 1 :]

    def _guarded(self, command: str, /, *args: Any, **kwargs: Any) -> Any:
        with self._read_only.ignore_read_only(command=command, namespace=self._resolve_namespace()):
            return getattr(self._redis, command)(*args, **kwargs)
        return None

    def _keyed_call(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        # redis-py names the key ``name`` (``key`` on getrange). In
        # ``hget(name, key)`` the field comes second, so a positional key wins.
        if args:
            return self._guarded(name, self._namespaced(args[0]), *args[1:], **kwargs)
        for param in ("name", "key"):
            if param in kwargs:
                kwargs[param] = self._namespaced(kwargs[param])
                return self._guarded(name, **kwargs)
        raise TypeError(f"{name}() missing the key argument")

    # ── Generic dispatch ─────────────────────────────────────────

    def execute(self, command: str, /, *args: Any, **kwargs: Any) -> Any:
        """Run *command* by its redis-py method name.

        Keyed commands get their key namespaced, positional or keyword
        (``name=``/``key=``). Multi-key and flush commands go through the
        namespace-aware methods of this class. Everything else is forwarded
        unmodified; when the raw client has no method of that name the
        command is sent with ``execute_command``.
        """
        lowered = command.lower()
        if lowered in KEYED_COMMANDS:
            return self._keyed_call(lowered, args, kwargs)
        if lowered in _COMMAND_ALIASES:
            return getattr(self, _COMMAND_ALIASES[lowered])(*args, **kwargs)
        if lowered in MULTI_KEY_COMMANDS or lowered in GLOBAL_FLUSH_COMMANDS:
            return getattr(self, lowered)(*args, **kwargs)

        method = getattr(self._redis, lowered, None)
        if callable(method):
            return self._read_only.guard(method, *args, **kwargs)
        return self._read_only.guard(self._redis.execute_command, command.upper(), *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not defined on the class: forward unmodified.
        if name.startswith("_"):
            raise AttributeError(name)
        attr = getattr(self._redis, name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def forward(*args: Any, **kwargs: Any) -> Any:
            return self._read_only.guard(attr, *args, **kwargs)

        return forward

    # ── Multi-key commands ───────────────────────────────────────

    def delete(self, *keys: KeyT) -> int | None:
        """``DEL`` the given keys of the current namespace."""
        return self._guarded("delete", *self._namespaced_all(keys))

    def unlink(self, *keys: KeyT) -> int | None:
        return self._guarded("unlink", *self._namespaced_all(keys))

    def exists(self, *keys: KeyT) -> int | None:
        return self._guarded("exists", *self._namespaced_all(keys))

    def touch(self, *keys: KeyT) -> int | None:
        return self._guarded("touch", *self._namespaced_all(keys))

    def mget(self, keys: KeyT | Iterable[KeyT], *args: KeyT) -> list[Any] | None:
        return self._guarded("mget", self._namespaced_all(_list_or_args(keys, args)))

    def mset(self, mapping: Mapping[KeyT, Any]) -> bool | None:
        namespace = self._resolve_namespace()
        return self._guarded("mset", {self._namespaced(k, namespace): v for k, v in mapping.items()})

    def msetnx(self, mapping: Mapping[KeyT, Any]) -> bool | None:
        namespace = self._resolve_namespace()
        return self._guarded("msetnx", {self._namespaced(k, namespace): v for k, v in mapping.items()})

    def rename(self, src: KeyT, dst: KeyT) -> bool | None:
        src, dst = self._namespaced_all((src, dst))
        return self._guarded("rename", src, dst)

    def renamenx(self, src: KeyT, dst: KeyT) -> bool | None:
        src, dst = self._namespaced_all((src, dst))
        return self._guarded("renamenx", src, dst)

    def rpoplpush(self, src: KeyT, dst: KeyT) -> Any:
        src, dst = self._namespaced_all((src, dst))
        return self._guarded("rpoplpush", src, dst)

    def brpoplpush(self, src: KeyT, dst: KeyT, timeout: int | None = 0) -> Any:
        src, dst = self._namespaced_all((src, dst))
        return self._guarded("brpoplpush", src, dst, timeout)

    def smove(self, src: KeyT, dst: KeyT, value: Any) -> bool | None:
        src, dst = self._namespaced_all((src, dst))
        return self._guarded("smove", src, dst, value)

    def sdiff(self, keys: KeyT | Iterable[KeyT], *args: KeyT) -> Any:
        return self._guarded("sdiff", self._namespaced_all(_list_or_args(keys, args)))

    def sinter(self, keys: KeyT | Iterable[KeyT], *args: KeyT) -> Any:
        return self._guarded("sinter", self._namespaced_all(_list_or_args(keys, args)))

    def sunion(self, keys: KeyT | Iterable[KeyT], *args: KeyT) -> Any:
        return self._guarded("sunion", self._namespaced_all(_list_or_args(keys, args)))

    def sdiffstore(self, dest: KeyT, keys: KeyT | Iterable[KeyT], *args: KeyT) -> int | None:
        dest, *sources = self._namespaced_all([dest, *_list_or_args(keys, args)])
        return self._guarded("sdiffstore", dest, sources)

    def sinterstore(self, dest: KeyT, keys: KeyT | Iterable[KeyT], *args: KeyT) -> int | None:
        dest, *sources = self._namespaced_all([dest, *_list_or_args(keys, args)])
        return self._guarded("sinterstore", dest, sources)

    def sunionstore(self, dest: KeyT, keys: KeyT | Iterable[KeyT], *args: KeyT) -> int | None:
        dest, *sources = self._namespaced_all([dest, *_list_or_args(keys, args)])
        return self._guarded("sunionstore", dest, sources)

    def _bpop(self, name: str, keys: KeyT | Iterable[KeyT], timeout: int | None) -> Any:
        namespace = self._resolve_namespace()
        names = [self._namespaced(k, namespace) for k in _list_or_args(keys, ())]
        result = self._guarded(name, names, timeout)
        if not result:
            return result
        key, value = result
        return self._strip_namespace(key, namespace), value

    def blpop(self, keys: KeyT | Iterable[KeyT], timeout: int | None = 0) -> Any:
        """``BLPOP``; the returned key has the namespace stripped."""
        return self._bpop("blpop", keys, timeout)

    def brpop(self, keys: KeyT | Iterable[KeyT], timeout: int | None = 0) -> Any:
        """``BRPOP``; the returned key has the namespace stripped."""
        return self._bpop("brpop", keys, timeout)

    def sort(
        self,
        name: KeyT,
        *args: Any,
        by: str | None = None,
        get: str | list[str] | None = None,
        store: KeyT | None = None,
        **kwargs: Any,
    ) -> Any:
        """``SORT`` with the key, ``BY``/``GET`` patterns and ``STORE`` namespaced.

        The ``GET #`` placeholder and ``BY nosort`` are passed through as-is.
        """
        namespace = self._resolve_namespace()
        if by is not None and by != "nosort":
            kwargs["by"] = self._namespaced(by, namespace)
        if get is not None:
            patterns = [get] if isinstance(get, str) else list(get)
            kwargs["get"] = [p if p == "#" else self._namespaced(p, namespace) for p in patterns]
        if store is not None:
            kwargs["store"] = self._namespaced(store, namespace)
        return self._guarded("sort", self._namespaced(name, namespace), *args, **kwargs)

    # ── Bulk operations ──────────────────────────────────────────

    def list_keys(self, pattern: str | None = None) -> list[KeyT]:
        """Keys of the current namespace matching *pattern*, prefix stripped.

        Uses ``SCAN`` iteration, so it does not block the server the way
        ``KEYS`` does. Returns ``[]`` if Redis rejects the scan as read-only.
        """
        namespace = self._resolve_namespace()
        match = f"{namespace}:{pattern or '*'}"
        with self._read_only.ignore_read_only(command="scan", namespace=namespace):
            return [
                self._strip_namespace(key, namespace)
                for key in self._redis.scan_iter(match=match)
            ]
        return []

    keys = list_keys

    def delete_keys_with_prefix(self, prefix: str) -> int:
        """Delete every key of the current namespace starting with *prefix*.

        Not atomic: keys created while this runs may survive.
        """
        deleted = 0
        for key in self.list_keys(f"{prefix}*"):
            deleted += self.delete(key) or 0
        if deleted:
            logger.debug("keys_deleted", prefix=prefix, count=deleted)
        return deleted

    def flush_namespace(self) -> int:
        """Delete every key of the current namespace, key by key.

        Never issues ``FLUSHDB``; other tenants' keys are left untouched.
        """
        namespace = self._resolve_namespace()
        deleted = 0
        for key in self.list_keys():
            deleted += self.delete(key) or 0
        logger.info("namespace_flushed", namespace=namespace, count=deleted)
        return deleted

    def flushdb(self, *args: Any, **kwargs: Any) -> int:
        """Same as :meth:`flush_namespace`. Does not flush the database."""
        return self.flush_namespace()

    def flushall(self, *args: Any, **kwargs: Any) -> int:
        """Same as :meth:`flush_namespace`. Does not flush the server."""
        return self.flush_namespace()

    # ── Connection management ────────────────────────────────────

    def reconnect(self) -> bool:
        """Drop pooled connections and open a fresh one.

        Connection errors propagate; this is not covered by the read-only guard.
        """
        self._redis.connection_pool.disconnect()
        result = self._redis.ping()
        logger.info("redis_reconnected", host=self.config.host, port=self.config.port, db=self.config.db)
        return result

    def close(self) -> None:
        self._redis.close()

    def __enter__(self) -> NamespacedRedis:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def new_cache_store(self, **kwargs: Any) -> NamespacedCache:
        """A JSON cache stored in the current tenant's namespace."""
        from tenantkv.cache import NamespacedCache

        return NamespacedCache(self, **kwargs)

    def __repr__(self) -> str:
        return f"NamespacedRedis(host={self.config.host!r}, port={self.config.port}, db={self.config.db})"


def _keyed_command(name: str) -> Callable[..., Any]:
    def command(self: NamespacedRedis, *args: Any, **kwargs: Any) -> Any:
        return self._keyed_call(name, args, kwargs)

    command.__name__ = name
    command.__qualname__ = f"NamespacedRedis.{name}"
    command.__doc__ = f"``{name.upper()}`` with its key prefixed by the current namespace."
    return command


for _name in sorted(KEYED_COMMANDS):
    setattr(NamespacedRedis, _name, _keyed_command(_name))
del _name


__all__ = ["NamespacedRedis"]
