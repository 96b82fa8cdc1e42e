"""
Command tables for the namespaced proxy.

``KEYED_COMMANDS`` lists redis-py client methods whose *first* positional
argument is a key. :class:`~tenantkv.client.NamespacedRedis` exposes each of
them as a method that prefixes that argument with the tenant namespace.

``MULTI_KEY_COMMANDS`` take several keys and are implemented one by one on
the client, since only some of their arguments are keys.

Anything in neither table is forwarded to the raw client unmodified. Keys
passed to such commands are *not* namespaced.
"""

from __future__ import annotations

STRING_COMMANDS = (
    "append",
    "decr",
    "decrby",
    "get",
    "getbit",
    "getdel",
    "getex",
    "getrange",
    "getset",
    "incr",
    "incrby",
    "incrbyfloat",
    "psetex",
    "set",
    "setbit",
    "setex",
    "setnx",
    "setrange",
    "strlen",
)

LIST_COMMANDS = (
    "lindex",
    "linsert",
    "llen",
    "lpop",
    "lpos",
    "lpush",
    "lpushx",
    "lrange",
    "lrem",
    "lset",
    "ltrim",
    "rpop",
    "rpush",
    "rpushx",
)

HASH_COMMANDS = (
    "hdel",
    "hexists",
    "hget",
    "hgetall",
    "hincrby",
    "hincrbyfloat",
    "hkeys",
    "hlen",
    "hmget",
    "hmset",
    "hscan",
    "hset",
    "hsetnx",
    "hstrlen",
    "hvals",
)

SET_COMMANDS = (
    "sadd",
    "scard",
    "sismember",
    "smembers",
    "smismember",
    "spop",
    "srandmember",
    "srem",
    "sscan",
)

SORTED_SET_COMMANDS = (
    "zadd",
    "zcard",
    "zcount",
    "zincrby",
    "zpopmax",
    "zpopmin",
    "zrange",
    "zrangebyscore",
    "zrank",
    "zrem",
    "zremrangebyrank",
    "zremrangebyscore",
    "zrevrange",
    "zrevrangebyscore",
    "zrevrank",
    "zscan",
    "zscore",
)

KEY_COMMANDS = (
    "expire",
    "expireat",
    "move",
    "persist",
    "pexpire",
    "pexpireat",
    "pttl",
    "ttl",
    "type",
)

KEYED_COMMANDS: frozenset[str] = frozenset(
    STRING_COMMANDS
    + LIST_COMMANDS
    + HASH_COMMANDS
    + SET_COMMANDS
    + SORTED_SET_COMMANDS
    + KEY_COMMANDS
)

MULTI_KEY_COMMANDS: frozenset[str] = frozenset(
    {
        "blpop",
        "brpop",
        "brpoplpush",
        "delete",
        "exists",
        "mget",
        "mset",
        "msetnx",
        "rename",
        "renamenx",
        "rpoplpush",
        "sdiff",
        "sdiffstore",
        "sinter",
        "sinterstore",
        "smove",
        "sunion",
        "sunionstore",
        "sort",
        "touch",
        "unlink",
    }
)

# Commands that would touch every tenant's data. The client maps them to
# namespace-scoped equivalents instead of forwarding them.
GLOBAL_FLUSH_COMMANDS: frozenset[str] = frozenset({"flushdb", "flushall"})


__all__ = [
    "GLOBAL_FLUSH_COMMANDS",
    "KEYED_COMMANDS",
    "MULTI_KEY_COMMANDS",
]
