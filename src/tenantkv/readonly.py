"""
Read-only state tracking and the read-only guard.

When Redis fails over, the old primary (or a replica we are still connected
to) rejects writes with ``READONLY You can't write against a read only
replica``. Request handling must not crash because of that: the guard turns
the rejection into a ``None`` result, records when it happened and logs one
warning per cooldown window so sustained failover does not flood the logs.

State machine::

    NORMAL ──(READONLY rejection)──▶ READ_ONLY
      ▲                                 │
      └────────(cooldown expires)───────┘

The cooldown only debounces warnings. Writes are never short-circuited while
the store is believed read-only; every call is issued and only its failure is
absorbed.

Examples:
    >>> state = ReadOnlyState()
    >>> state.is_recently_read_only()
    False
    >>> state.record_read_only()
    >>> state.is_recently_read_only()
    True
    >>> state.clear_read_only()
    >>> state.is_recently_read_only()
    False

Tags:
    tenantkv, redis, failover, read-only, resilience

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from redis.exceptions import ReadOnlyError, ResponseError

from tenantkv.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_COOLDOWN_SECONDS = 15.0


def is_read_only_error(exc: BaseException) -> bool:
    """True if *exc* is Redis refusing a command because it is read-only."""
    if isinstance(exc, ReadOnlyError):
        return True
    return isinstance(exc, ResponseError) and "READONLY" in str(exc).upper()


class ReadOnlyState:
    """Last observed read-only rejection, shared by every wrapper in a process.

    Thread-safe. ``clock`` must be monotonic; it is injectable for tests.
    """

    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._last_read_only: float | None = None

    @property
    def last_read_only(self) -> float | None:
        return self._last_read_only

    def is_recently_read_only(self) -> bool:
        """True iff a rejection was recorded within the cooldown window."""
        last = self._last_read_only
        if last is None:
            return False
        return self._clock() - last < self.cooldown_seconds

    def record_read_only(self) -> None:
        with self._lock:
            self._last_read_only = self._clock()

    def clear_read_only(self) -> None:
        with self._lock:
            self._last_read_only = None

    def _handle_rejection(self, exc: BaseException, log_fields: dict[str, Any]) -> None:
        if not self.is_recently_read_only():
            logger.warning(
                "redis_read_only",
                message="Redis is in a readonly state. Performed a noop",
                error=str(exc),
                **log_fields,
            )
        self.record_read_only()

    def guard(self, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T | None:
        """Run ``operation(*args, **kwargs)``, absorbing read-only rejections.

        Returns the operation's result, or ``None`` when Redis rejected it as
        read-only. Any other exception propagates unchanged.
        """
        try:
            return operation(*args, **kwargs)
        except ResponseError as exc:
            if not is_read_only_error(exc):
                raise
            self._handle_rejection(exc, {"command": getattr(operation, "__name__", repr(operation))})
            return None

    @contextmanager
    def ignore_read_only(self, **log_fields: Any) -> Iterator[None]:
        """Context-manager form of :meth:`guard` for multi-step blocks.

        A rejection ends the block early; execution resumes after the
        ``with`` statement.
        """
        try:
            yield
        except ResponseError as exc:
            if not is_read_only_error(exc):
                raise
            self._handle_rejection(exc, log_fields)

    def __repr__(self) -> str:
        return (
            f"ReadOnlyState(cooldown_seconds={self.cooldown_seconds}, "
            f"recently_read_only={self.is_recently_read_only()})"
        )


_shared_state: ReadOnlyState | None = None
_shared_lock = threading.Lock()


def shared_read_only_state() -> ReadOnlyState:
    """Process-wide state used by wrappers that were not given one.

    Created on first use with the configured cooldown.
    """
    global _shared_state
    with _shared_lock:
        if _shared_state is None:
            from tenantkv.config import get_settings

            _shared_state = ReadOnlyState(get_settings().read_only_cooldown_seconds)
        return _shared_state


def reset_shared_read_only_state() -> None:
    """Drop the process-wide state (primarily for testing)."""
    global _shared_state
    with _shared_lock:
        _shared_state = None


__all__ = [
    "DEFAULT_COOLDOWN_SECONDS",
    "ReadOnlyState",
    "is_read_only_error",
    "reset_shared_read_only_state",
    "shared_read_only_state",
]
