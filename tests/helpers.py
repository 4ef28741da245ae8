"""Shared handlers and payload tables for rpcengine tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from rpcengine import ErrorCode, Request, Response, Server, make_error_response, make_success_response


def subtract(request: Request) -> Response:
    params = request.params
    if isinstance(params, list):
        return request.success_response(params[0] - params[1])
    if isinstance(params, dict):
        return request.success_response(params["minuend"] - params["subtrahend"])
    return request.success_response(None)


def add_all(request: Request) -> Response:
    assert isinstance(request.params, list)
    return request.success_response(sum(request.params))


def notify_hello(request: Request) -> Response:
    return request.success_response(None)


def get_data(request: Request) -> Response:
    return request.success_response(["hello", 5])


def force_fault(request: Request) -> Response:
    raise RuntimeError("uh-oh! db password is hunter2")


def handler_with_state(request: Request) -> Response:
    return request.success_response(request.get_state("foo"))


def reject_params(request: Request) -> Response:
    return request.error_response(ErrorCode.INVALID_PARAMS)


class BlockingHandler:
    """Handler that parks until released, for observing in-flight requests."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()

    def __call__(self, request: Request) -> Response:
        self.started.set()
        self.release.wait(timeout=5.0)
        return request.success_response("released")


def make_test_server() -> Server:
    """Build a Server with the handlers used by the JSON-RPC 2.0 examples."""
    server = Server()
    server.set_handler("subtract", subtract)
    server.set_handler("sum", add_all)
    server.set_handler("notify_hello", notify_hello)
    server.set_handler("get_data", get_data)
    server.set_handler("panic", force_fault)
    server.set_handler("handler_with_state", handler_with_state)
    server.set_handler("reject_params", reject_params)
    return server


@dataclass(frozen=True)
class PayloadCase:
    """One payload with its expected responses and counter deltas."""

    name: str
    payload: str
    responses: list[Response] = field(default_factory=list)
    payloads: int = 1
    requests: int = 0
    success: int = 0
    error: int = 0
    success_notifications: int = 0
    error_notifications: int = 0

    def __str__(self) -> str:
        return self.name


def err(request_id: Any, code: int, message: str = "") -> Response:
    return make_error_response(request_id, code, message)


def ok(request_id: Any, result: Any) -> Response:
    return make_success_response(request_id, result)


# Examples from https://www.jsonrpc.org/specification#examples, then extra edge cases.
SPEC_CASES: list[PayloadCase] = [
    PayloadCase(
        name="positional params 1",
        payload='{"jsonrpc": "2.0", "method": "subtract", "params": [42, 23], "id": 1}',
        responses=[ok(1, 19)],
        requests=1,
        success=1,
    ),
    PayloadCase(
        name="positional params 2",
        payload='{"jsonrpc": "2.0", "method": "subtract", "params": [23, 42], "id": 2}',
        responses=[ok(2, -19)],
        requests=1,
        success=1,
    ),
    PayloadCase(
        name="named params 1",
        payload='{"jsonrpc": "2.0", "method": "subtract", '
        '"params": {"subtrahend": 23, "minuend": 42}, "id": 3}',
        responses=[ok(3, 19)],
        requests=1,
        success=1,
    ),
    PayloadCase(
        name="named params 2",
        payload='{"jsonrpc": "2.0", "method": "subtract", '
        '"params": {"minuend": 42, "subtrahend": 23}, "id": 4}',
        responses=[ok(4, 19)],
        requests=1,
        success=1,
    ),
    PayloadCase(
        name="notification 1",
        payload='{"jsonrpc": "2.0", "method": "subtract", "params": [1,2,3,4,5]}',
        requests=1,
        success_notifications=1,
    ),
    PayloadCase(
        name="notification 2",
        payload='{"jsonrpc": "2.0", "method": "subtract"}',
        requests=1,
        success_notifications=1,
    ),
    PayloadCase(
        name="non-existent method",
        payload='{"jsonrpc": "2.0", "method": "foobar", "id": 1}',
        responses=[err(1, ErrorCode.METHOD_NOT_FOUND)],
        error=1,
    ),
    PayloadCase(
        name="invalid JSON",
        payload='{"jsonrpc": "2.0", "method": "foobar, "params": "bar", "baz]',
        responses=[err(None, ErrorCode.PARSE_ERROR)],
        error=1,
    ),
    PayloadCase(
        name="invalid request object",
        payload='{"jsonrpc": "2.0", "method": 1, "params": "bar"}',
        responses=[err(None, ErrorCode.INVALID_REQUEST, "Method must be a string.")],
        error=1,
    ),
    PayloadCase(
        name="batch with invalid JSON",
        payload='''[
            {"jsonrpc": "2.0", "method": "sum", "params": [1,2,4], "id": "1"},
            {"jsonrpc": "2.0", "method"
        ]''',
        responses=[err(None, ErrorCode.PARSE_ERROR)],
        error=1,
    ),
    PayloadCase(
        name="empty batch",
        payload="[]",
        responses=[err(None, ErrorCode.INVALID_REQUEST, "Batch is empty.")],
        error=1,
    ),
    PayloadCase(
        name="invalid batch of one",
        payload="[1]",
        responses=[err(None, ErrorCode.INVALID_REQUEST)],
        error=1,
    ),
    PayloadCase(
        name="invalid batch",
        payload="[1,2,3]",
        responses=[err(None, ErrorCode.INVALID_REQUEST)] * 3,
        error=3,
    ),
    PayloadCase(
        name="mixed batch",
        payload='''[
            {"jsonrpc": "2.0", "method": "sum", "params": [1,2,4], "id": "1"},
            {"jsonrpc": "2.0", "method": "notify_hello", "params": [7]},
            {"jsonrpc": "2.0", "method": "subtract", "params": [42,23], "id": "2"},
            {"foo": "boo"},
            {"jsonrpc": "2.0", "method": "foo.get", "params": {"name": "myself"}, "id": "5"},
            {"jsonrpc": "2.0", "method": "get_data", "id": "9"}
        ]''',
        responses=[
            ok("1", 7),
            ok("2", 19),
            err(None, ErrorCode.INVALID_REQUEST, "Version (jsonrpc) must be a string."),
            err("5", ErrorCode.METHOD_NOT_FOUND),
            ok("9", ["hello", 5]),
        ],
        requests=4,
        success=3,
        error=2,
        success_notifications=1,
    ),
    PayloadCase(
        name="batch of notifications",
        payload='''[
            {"jsonrpc": "2.0", "method": "notify_sum", "params": [1,2,4]},
            {"jsonrpc": "2.0", "method": "notify_hello", "params": [7]}
        ]''',
        requests=1,
        success_notifications=1,
        error_notifications=1,
    ),
    PayloadCase(
        name="wrong version",
        payload='{"jsonrpc": "2", "method": "subtract", "params": [42, 23], "id": 2}',
        responses=[err(2, ErrorCode.INVALID_REQUEST, "Version is not 2.0.")],
        error=1,
    ),
    PayloadCase(
        name="bad version type",
        payload='{"jsonrpc": true, "method": "subtract", "params": [42, 23], "id": 2}',
        responses=[err(2, ErrorCode.INVALID_REQUEST, "Version (jsonrpc) must be a string.")],
        error=1,
    ),
    PayloadCase(
        name="missing version",
        payload='{"method": "subtract", "params": [42, 23], "id": 2}',
        responses=[err(2, ErrorCode.INVALID_REQUEST, "Version (jsonrpc) must be a string.")],
        error=1,
    ),
    PayloadCase(
        name="non-existent method as notification",
        payload='{"jsonrpc": "2.0", "method": "foobar"}',
        error_notifications=1,
    ),
    PayloadCase(
        name="faulting notification",
        payload='{"jsonrpc": "2.0", "method": "panic"}',
        requests=1,
        error_notifications=1,
    ),
    PayloadCase(
        name="recover from fault",
        payload='{"jsonrpc": "2.0", "method": "panic", "id": 2}',
        responses=[err(2, ErrorCode.SERVER_ERROR)],
        requests=1,
        error=1,
    ),
    PayloadCase(
        name="handler-returned error",
        payload='{"jsonrpc": "2.0", "method": "reject_params", "params": [], "id": "x"}',
        responses=[err("x", ErrorCode.INVALID_PARAMS)],
        requests=1,
        error=1,
    ),
    PayloadCase(
        name="handler-returned error as notification",
        payload='{"jsonrpc": "2.0", "method": "reject_params"}',
        requests=1,
        error_notifications=1,
    ),
    PayloadCase(
        name="bad id type",
        payload='{"jsonrpc": "2.0", "method": "subtract", "params": [1, 1], "id": [1]}',
        responses=[err(None, ErrorCode.INVALID_REQUEST, "Id must be a string, number or null.")],
        error=1,
    ),
    PayloadCase(
        name="bad params type",
        payload='{"jsonrpc": "2.0", "method": "subtract", "params": "bar", "id": 7}',
        responses=[err(7, ErrorCode.INVALID_REQUEST, "Params must be an array or object.")],
        error=1,
    ),
    PayloadCase(
        name="non-object single payload",
        payload="42",
        responses=[err(None, ErrorCode.PARSE_ERROR)],
        error=1,
    ),
    PayloadCase(
        name="string single payload",
        payload='"subtract"',
        responses=[err(None, ErrorCode.PARSE_ERROR)],
        error=1,
    ),
    PayloadCase(
        name="deeply nested params",
        payload='{"jsonrpc": "2.0", "method": "get_data", "params": '
        + "[" * 400
        + "]" * 400
        + ', "id": 1}',
        responses=[err(1, ErrorCode.INVALID_REQUEST)],
        error=1,
    ),
    PayloadCase(
        name="nesting beyond the decoder limit",
        payload="[" * 100000 + "]" * 100000,
        responses=[err(None, ErrorCode.PARSE_ERROR)],
        error=1,
    ),
]


def sort_key(response: Response) -> str:
    """Order-independent comparison key for batch results."""
    return response.to_json()
