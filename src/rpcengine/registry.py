"""Method name to handler mapping.

Handlers are plain synchronous callables taking the Request and returning
a Response built through the request's responder methods:

    def subtract(request: Request) -> Response:
        a, b = request.params
        return request.success_response(a - b)

Registration is expected to finish before the server takes traffic. The
lock only makes concurrent registration and lookup free of data races; a
lookup racing a registration may observe either the old or new handler.
"""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from rpcengine.core.logging import get_logger
from rpcengine.exceptions import HandlerRegistrationError
from rpcengine.protocol import Request, Response

_logger = get_logger("registry")

RequestHandler = Callable[[Request], Response]


class HandlerRegistry:
    """Thread-safe mapping from JSON-RPC method names to handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, RequestHandler] = {}
        self._lock = Lock()

    def set(self, method: str, handler: RequestHandler) -> None:
        """Register *handler* for *method*, replacing any previous one.

        Raises:
            HandlerRegistrationError: If *method* is empty or not a string,
                or *handler* is not callable.
        """
        if not isinstance(method, str) or not method:
            raise HandlerRegistrationError("method must be a non-empty string")
        if not callable(handler):
            raise HandlerRegistrationError(
                f"handler for {method!r} must be callable, got {type(handler).__name__}"
            )

        with self._lock:
            replaced = method in self._handlers
            self._handlers[method] = handler

        _logger.debug(
            "rpc_handler_replaced" if replaced else "rpc_handler_registered",
            method=method,
        )

    def get(self, method: str) -> RequestHandler | None:
        """Return the handler bound to *method*, or None."""
        with self._lock:
            return self._handlers.get(method)

    @property
    def methods(self) -> list[str]:
        """Registered method names, sorted."""
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, method: object) -> bool:
        with self._lock:
            return method in self._handlers

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)


__all__ = ["HandlerRegistry", "RequestHandler"]
