"""
Structured error types for tenantkv.

Only configuration and namespace problems are raised by tenantkv itself.
Errors coming from Redis are never wrapped: read-only rejections are absorbed
by :mod:`tenantkv.readonly` and every other ``redis.exceptions.RedisError``
reaches the caller unchanged, so retry/backoff stays the caller's decision.

Architecture:
    ::

        TenantKVError  (category, context, cause)
        ├── ConfigError         (CONFIG)
        │   ├── MissingConfigError
        │   └── InvalidConfigError
        └── NamespaceError      (NAMESPACE)

Examples:
    >>> error = MissingConfigError("redis.host")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.to_dict()["message"]
    'Missing required configuration: redis.host'

Tags:
    error-handling, exception-hierarchy, tenantkv

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification in logs."""

    CONFIG = "CONFIG"
    NAMESPACE = "NAMESPACE"
    INTERNAL = "INTERNAL"


class TenantKVError(Exception):
    """
    Base exception for all tenantkv errors.

    Carries a category, a free-form context dict for structured logging and
    an optional chained cause.

    Examples:
        >>> error = TenantKVError("boom").with_context(namespace="site_a")
        >>> error.context
        {'namespace': 'site_a'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TenantKVError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TenantKVError):
    """Configuration error. Must be fixed by the operator."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}", **kwargs)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", **kwargs)


# =============================================================================
# NAMESPACE ERRORS
# =============================================================================


class NamespaceError(TenantKVError):
    """No usable tenant namespace could be resolved."""

    default_category = ErrorCategory.NAMESPACE


__all__ = [
    "ErrorCategory",
    "TenantKVError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "NamespaceError",
]
