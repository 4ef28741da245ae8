"""JSON-RPC 2.0 error taxonomy.

The five codes reserved by the JSON-RPC 2.0 specification, the
implementation-defined server error band [-32099, -32000], and the
library-internal ``SUCCESS`` sentinel (never sent on the wire).
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric JSON-RPC error codes.

    ``SERVER_ERROR`` is the top of the server error band and
    ``SERVER_ERROR_MIN`` its bottom; any code in between is a server error
    whose meaning the server and its clients agree on.
    """

    SUCCESS = 0
    """Not a JSON-RPC code. ``Response.error_code`` returns it when no error is set."""

    PARSE_ERROR = -32700
    """Invalid JSON was received."""

    INVALID_REQUEST = -32600
    """The JSON is not a valid Request object (wrong types, version not "2.0")."""

    METHOD_NOT_FOUND = -32601
    """The method does not exist or is not available."""

    INVALID_PARAMS = -32602
    """Invalid method parameter(s)."""

    INTERNAL_ERROR = -32603
    """Error while passing the request to the handler."""

    SERVER_ERROR = -32000
    """Generic server error, also used for handler faults."""

    SERVER_ERROR_MIN = -32099
    """Lower bound of the server error band."""


_CANONICAL_MESSAGES: dict[int, str] = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


def is_server_error(code: int) -> bool:
    """Return whether *code* falls in the server error band."""
    return ErrorCode.SERVER_ERROR_MIN <= code <= ErrorCode.SERVER_ERROR


def error_message_for_code(code: int) -> str:
    """Return the canonical message for *code*.

    Reserved codes map to their specification message, the server band to
    "Server error", and everything else (``SUCCESS`` included) to
    "Unknown error".
    """
    message = _CANONICAL_MESSAGES.get(code)
    if message is not None:
        return message
    if is_server_error(code):
        return "Server error"
    return "Unknown error"


__all__ = ["ErrorCode", "error_message_for_code", "is_server_error"]
