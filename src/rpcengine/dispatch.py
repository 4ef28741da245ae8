"""Dispatch engine: validate, route and run one JSON-RPC request.

The engine owns the fault boundary around handlers. Any exception a
handler raises becomes a ``SERVER_ERROR`` response with the generic
message; the exception text is logged, never sent to the client.
"""

from __future__ import annotations

from rpcengine.core.logging import DispatchContext, get_logger, with_context
from rpcengine.errors import ErrorCode
from rpcengine.protocol import SUPPORTED_VERSION, Request, Response
from rpcengine.registry import HandlerRegistry, RequestHandler
from rpcengine.stats import ServerStats

_logger = get_logger("dispatch")


class Dispatcher:
    """Routes a single Request to its handler and records the outcome.

    ``dispatch`` does not count payloads; the public ``Server`` entry
    points do, so a batch is counted once however many items it holds.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        stats: ServerStats,
        *,
        server_name: str = "rpcengine",
        log_handler_faults: bool = True,
    ) -> None:
        self._registry = registry
        self._stats = stats
        self._server_name = server_name
        self._log_handler_faults = log_handler_faults
        self._logger = _logger.bind(server=server_name)

    def dispatch(self, request: Request) -> list[Response]:
        """Run *request* and return its responses.

        Returns:
            A one-element list for a request with an id, or an empty list
            for a notification, whatever its outcome.
        """
        if request.jsonrpc != SUPPORTED_VERSION:
            self._logger.debug(
                "rpc_invalid_version",
                method=request.method,
                version=request.jsonrpc,
            )
            response = request.error_response(ErrorCode.INVALID_REQUEST, "Version is not 2.0.")
        else:
            handler = self._registry.get(request.method)
            if handler is None:
                self._logger.debug(
                    "rpc_method_not_found",
                    method=request.method,
                    request_id=request.id,
                )
                response = request.error_response(ErrorCode.METHOD_NOT_FOUND)
            else:
                response = self._invoke(handler, request)

        self._stats.record_outcome(
            notification=request.is_notification,
            success=response.error_code == ErrorCode.SUCCESS,
        )

        # Notifications never get a reply, even when they fail.
        if request.is_notification:
            return []
        return [response]

    def _invoke(self, handler: RequestHandler, request: Request) -> Response:
        """Call *handler* inside the fault boundary, tracking the active gauge."""
        ctx = DispatchContext(
            method=request.method,
            request_id=request.id,
            server=self._server_name,
        )

        self._stats.record_request_started()
        try:
            with with_context(ctx):
                response = handler(request)
        except Exception as exc:
            self._log_fault(request, exc)
            return request.error_response(ErrorCode.SERVER_ERROR)
        finally:
            self._stats.record_request_finished()

        if not isinstance(response, Response):
            self._logger.error(
                "rpc_handler_bad_return",
                method=request.method,
                request_id=request.id,
                returned_type=type(response).__name__,
            )
            return request.error_response(ErrorCode.SERVER_ERROR)

        return response

    def _log_fault(self, request: Request, exc: Exception) -> None:
        if self._log_handler_faults:
            self._logger.exception(
                "rpc_handler_fault",
                method=request.method,
                request_id=request.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        else:
            self._logger.debug(
                "rpc_handler_fault",
                method=request.method,
                request_id=request.id,
                error_type=type(exc).__name__,
            )


__all__ = ["Dispatcher"]
