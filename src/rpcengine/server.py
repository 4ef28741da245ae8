"""JSON-RPC 2.0 server: the public entry point of rpcengine.

The server performs no I/O. A transport hands it raw payloads and sends
back whatever it returns:

    server = Server()
    server.set_handler("subtract", subtract)

    responses = server.handle(body)
    if responses:
        reply(serialize_responses(responses))

Requests can also be built in code and dispatched directly:

    request = Request(method="subtract", params=[42, 23], id=generate_request_id())
    [response] = server.handle_request(request)

Every ``handle*`` call blocks the calling thread while handlers run. The
server is safe to call from many threads at once; handlers should be
registered before traffic starts.
"""

from __future__ import annotations

from rpcengine.batch import BatchProcessor, Payload
from rpcengine.core.config import ServerConfig
from rpcengine.core.logging import get_logger
from rpcengine.dispatch import Dispatcher
from rpcengine.protocol import Request, Response, State
from rpcengine.registry import HandlerRegistry, RequestHandler
from rpcengine.stats import ServerStats

_logger = get_logger("server")


class Server:
    """Dispatches JSON-RPC 2.0 payloads to registered handlers.

    Parameters
    ----------
    config:
        Server settings. Defaults to ``ServerConfig()``.
    """

    def __init__(self, config: ServerConfig | None = None) -> None:
        self._config = config or ServerConfig()
        self._registry = HandlerRegistry()
        self._stats = ServerStats()
        self._dispatcher = Dispatcher(
            self._registry,
            self._stats,
            server_name=self._config.name,
            log_handler_faults=self._config.log_handler_faults,
        )
        self._batch = BatchProcessor(self._dispatcher, self._stats)

        _logger.debug("rpc_server_created", server=self._config.name)

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def stats(self) -> ServerStats:
        """Live statistics for this server."""
        return self._stats

    @property
    def methods(self) -> list[str]:
        """Registered method names, sorted."""
        return self._registry.methods

    # ------------------------------------------------------------------
    # Handler registry
    # ------------------------------------------------------------------

    def set_handler(self, method: str, handler: RequestHandler) -> None:
        """Register (or replace) the handler for *method*."""
        self._registry.set(method, handler)

    def get_handler(self, method: str) -> RequestHandler | None:
        """Return the handler for *method*, or None if none is registered."""
        return self._registry.get(method)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle_request(self, request: Request) -> list[Response]:
        """Dispatch an already-built Request.

        Returns a one-element list, or an empty list for a notification.
        """
        self._stats.record_payload()
        return self._dispatcher.dispatch(request)

    def handle_with_state(self, payload: Payload, state: State) -> list[Response]:
        """Handle a raw payload, passing *state* to every request in it.

        The same *state* mapping is shared by every item of a batch.
        Never raises for malformed input; every failure becomes an error
        response.
        """
        self._stats.record_payload()
        return self._batch.process(payload, state)

    def handle(self, payload: Payload) -> list[Response]:
        """Handle a raw payload: a single request, a notification or a batch."""
        return self.handle_with_state(payload, {})


__all__ = ["Server"]
