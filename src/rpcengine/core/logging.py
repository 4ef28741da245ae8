"""Structured logging for rpcengine.

Wraps structlog with a small component-scoped logger and a per-dispatch
context so that log lines emitted while a handler runs carry the JSON-RPC
method and request id without the handler having to pass them around.

Example usage:
    from rpcengine.core.logging import configure_logging, get_logger

    # Configure once at startup (the embedding application owns this)
    configure_logging(level="DEBUG", format="console")

    logger = get_logger("billing")
    logger.info("invoice_created", invoice_id=42)

    # Inside a handler, method/request_id are added automatically:
    def charge(request):
        logger.info("charging")  # ... method="charge" request_id=7
        return request.success_response(True)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from rpcengine.core.config import LogConfig

# Field names whose values never reach a log sink
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "api-key",
    "token",
    "secret",
    "password",
    "credential",
    "auth",
    "bearer",
    "authorization",
})


@dataclass(frozen=True)
class DispatchContext:
    """Correlation fields for the request currently being dispatched.

    Attributes:
        method: The JSON-RPC method name.
        request_id: The request identifier (None for notifications).
        server: Name of the server doing the dispatch.
    """

    method: str
    request_id: int | float | str | None = None
    server: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to log fields, leaving out unset values."""
        result: dict[str, Any] = {"method": self.method}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.server is not None:
            result["server"] = self.server
        return result


_current_context: ContextVar[DispatchContext | None] = ContextVar(
    "rpcengine_dispatch_context", default=None
)


def get_current_context() -> DispatchContext | None:
    """Return the DispatchContext of the enclosing dispatch, if any."""
    return _current_context.get()


@contextmanager
def with_context(ctx: DispatchContext) -> Iterator[DispatchContext]:
    """Set *ctx* as the current DispatchContext for the duration of a block.

    Contexts nest: the previous value is restored on exit, so a handler
    that dispatches a nested request does not lose its own context.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" for values whose key looks sensitive."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields, one level deep."""
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that merges the current DispatchContext.

    Explicitly bound fields win over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


class EngineLogger:
    """Component-scoped wrapper around a structlog BoundLogger.

    The underlying structlog logger is fetched on every call, so loggers
    created at import time still honour a later configure_logging().
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> EngineLogger:
        """Return a new logger with additional bound fields."""
        new_logger = EngineLogger.__new__(EngineLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def unbind(self, *keys: str) -> EngineLogger:
        """Return a new logger without the given bound fields."""
        new_logger = EngineLogger.__new__(EngineLogger)
        new_logger._component = self._component
        new_logger._context = {k: v for k, v in self._context.items() if k not in keys}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._get_logger().exception(event, **kw)


def _get_processors(
    format: Literal["json", "console"],  # noqa: A002
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]

    if include_context:
        processors.append(_add_context)

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ])

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console"] = "console",  # noqa: A002
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure structlog and the stdlib root logger.

    Console output goes to stderr; JSON output goes to stdout so it can be
    piped into a collector. Call once at application startup.

    Args:
        level: Minimum log level to emit.
        format: "console" for human-readable, "json" for one object per line.
        include_timestamps: Add ISO8601 UTC timestamps.
        include_context: Add DispatchContext fields (method, request_id).
    """
    log_level = getattr(logging, level)

    stream = sys.stdout if format == "json" else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    structlog.configure(
        processors=_get_processors(format, include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging_from(config: LogConfig) -> None:
    """Configure logging from a LogConfig model."""
    configure_logging(
        level=config.level,
        format=config.format,
        include_timestamps=config.include_timestamps,
        include_context=config.include_context,
    )


def get_logger(component: str, **initial_context: Any) -> EngineLogger:
    """Get a logger bound to *component* (e.g. "server", "batch")."""
    return EngineLogger(component, **initial_context)


__all__ = [
    "DispatchContext",
    "EngineLogger",
    "SENSITIVE_PATTERNS",
    "configure_logging",
    "configure_logging_from",
    "get_current_context",
    "get_logger",
    "with_context",
]
