"""rpcengine: JSON-RPC 2.0 message dispatch without a transport.

Parses, validates and dispatches JSON-RPC 2.0 payloads (single calls,
notifications and batches) to registered handlers, and keeps live
statistics. Bring your own transport: hand ``Server.handle`` the raw body
and send back what it returns.
"""

from rpcengine.batch import build_request, parse_request
from rpcengine.core.config import LogConfig, ServerConfig
from rpcengine.core.logging import configure_logging, configure_logging_from, get_logger
from rpcengine.errors import ErrorCode, error_message_for_code, is_server_error
from rpcengine.exceptions import (
    HandlerRegistrationError,
    RequestParseError,
    ResponseParseError,
    RpcEngineError,
)
from rpcengine.protocol import (
    SUPPORTED_VERSION,
    ErrorDetail,
    Request,
    Response,
    State,
    generate_request_id,
    make_error_response,
    make_server_error_response,
    make_success_response,
    parse_responses,
    serialize_responses,
)
from rpcengine.registry import HandlerRegistry, RequestHandler
from rpcengine.server import Server
from rpcengine.stats import ServerStats, StatReporter, StatsSnapshot

__version__ = "0.1.0"

__all__ = [
    "SUPPORTED_VERSION",
    "ErrorCode",
    "ErrorDetail",
    "HandlerRegistrationError",
    "HandlerRegistry",
    "LogConfig",
    "Request",
    "RequestHandler",
    "RequestParseError",
    "Response",
    "ResponseParseError",
    "RpcEngineError",
    "Server",
    "ServerConfig",
    "ServerStats",
    "StatReporter",
    "State",
    "StatsSnapshot",
    "build_request",
    "configure_logging",
    "configure_logging_from",
    "error_message_for_code",
    "generate_request_id",
    "get_logger",
    "is_server_error",
    "make_error_response",
    "make_server_error_response",
    "make_success_response",
    "parse_request",
    "parse_responses",
    "serialize_responses",
]
