"""Configuration models for rpcengine.

Pydantic v2 models for the server's settings. Configuration is optional:
``Server()`` runs with defaults, and applications that keep settings in a
YAML file can load them with ``ServerConfig.from_yaml``.

Example YAML:

    name: billing-rpc
    log_handler_faults: true
    logging:
      level: DEBUG
      format: json
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field


class LogConfig(BaseModel):
    """Configuration for structured logging.

    Consumed by ``configure_logging_from``; the server itself never
    reconfigures process-wide logging.
    """

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Include ISO8601 UTC timestamps in log entries",
    )
    include_context: bool = Field(
        default=True,
        description="Include the dispatch context (method, request_id) in log entries",
    )


class ServerConfig(BaseModel):
    """Settings for a ``Server`` instance."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(
        default="rpcengine",
        min_length=1,
        description="Server name, bound to every log line the server emits",
    )
    log_handler_faults: bool = Field(
        default=True,
        description="Log handler exceptions at error level with traceback. "
        "When False they are logged at debug level without traceback. "
        "Fault detail never reaches the wire response either way.",
    )
    logging: LogConfig = Field(
        default_factory=LogConfig,
        description="Logging settings for the embedding application",
    )

    @classmethod
    def from_yaml(cls, path: Path) -> ServerConfig:
        """Load server configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> ServerConfig:
        """Load server configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})


__all__ = ["LogConfig", "ServerConfig"]
