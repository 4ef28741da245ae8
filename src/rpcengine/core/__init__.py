"""Ambient infrastructure: configuration models and structured logging."""

from rpcengine.core.config import LogConfig, ServerConfig
from rpcengine.core.logging import (
    DispatchContext,
    configure_logging,
    configure_logging_from,
    get_logger,
)

__all__ = [
    "DispatchContext",
    "LogConfig",
    "ServerConfig",
    "configure_logging",
    "configure_logging_from",
    "get_logger",
]
