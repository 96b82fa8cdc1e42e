"""
Structured logging for tenantkv.

Configures structlog once at process start and hands out loggers. Events are
snake_case names with keyword fields, e.g.::

    logger = get_logger(__name__)
    logger.warning("redis_read_only", namespace="site_a", command="set")

Output (JSON format)::

    {
      "@timestamp": "2026-10-19T10:00:00Z",
      "log.level": "warning",
      "service.name": "tenantkv",
      "tenant": "site_a",
      "event": "redis_read_only",
      "namespace": "site_a",
      "command": "set"
    }

Level and format default to the ``log_level`` / ``log_format`` settings
(``TENANTKV_LOG_LEVEL``, ``TENANTKV_LOG_FORMAT``). ``log_format`` is
``json``, ``console`` or ``auto`` (JSON unless stderr is a TTY).

Tags:
    logging, structlog, observability, tenantkv

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "tenantkv"


def _ecs_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename timestamp/level to their ECS names and tag the service."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    event_dict.setdefault("service.name", SERVICE_NAME)
    return event_dict


def _use_json(log_format: str) -> bool:
    if log_format == "auto":
        return not sys.stderr.isatty()
    return log_format == "json"


def configure_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Configure structlog (and stdlib logging, used by redis-py).

    Args:
        level: Log level name. Defaults to the ``log_level`` setting.
        json_format: JSON or console output. Defaults to the ``log_format``
            setting.
    """
    if level is None or json_format is None:
        from tenantkv.config import get_settings

        settings = get_settings()
        level = level or settings.log_level
        if json_format is None:
            json_format = _use_json(settings.log_format)

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level {level!r}")

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if json_format:
        processors += [_ecs_fields, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields into every subsequent log line of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


__all__ = [
    "SERVICE_NAME",
    "bind_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
