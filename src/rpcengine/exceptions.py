"""Exception hierarchy for rpcengine.

All library exceptions inherit from RpcEngineError. None of them escape
``Server.handle``/``handle_request``: malformed input there always becomes
an error Response. They are raised only by the standalone helpers
(``parse_request``, ``parse_responses``) and by handler registration.
"""

from __future__ import annotations


class RpcEngineError(Exception):
    """Base exception for all rpcengine errors."""


class RequestParseError(RpcEngineError):
    """Raised when text cannot be resolved into a JSON-RPC request.

    Carries the JSON-RPC error ``code`` the server would have answered
    with, and whatever ``request_id`` could be salvaged from the payload.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int,
        request_id: int | float | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.request_id = request_id


class ResponseParseError(RpcEngineError):
    """Raised when text cannot be decoded into JSON-RPC responses."""


class HandlerRegistrationError(RpcEngineError):
    """Raised when a handler is registered with an invalid name or target."""
