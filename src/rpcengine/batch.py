"""Payload shape detection, request resolution and batch fan-out.

A payload is decoded once. A top-level array is a batch: each element is
resolved and dispatched independently, so one malformed or failing item
never affects the others. A top-level object is a single request, and any
other top-level value is a parse error.

Structural errors found before a Request can be built (bad JSON, a
non-object, wrong member types, an empty batch) are always answered, even
though their id is usually null. Only genuine notifications go unanswered.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from rpcengine.core.logging import get_logger
from rpcengine.dispatch import Dispatcher
from rpcengine.errors import ErrorCode, error_message_for_code
from rpcengine.exceptions import RequestParseError
from rpcengine.protocol import Request, Response, State, make_error_response
from rpcengine.stats import ServerStats

_logger = get_logger("batch")

Payload = str | bytes | bytearray


def _salvage_id(data: dict[str, Any]) -> int | float | str | None:
    """Return the payload's id if it is a usable one, else None."""
    request_id = data.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (int, float, str)):
        return None
    return request_id


def build_request(data: Any, state: State | None = None) -> Request:
    """Resolve one decoded JSON value into a Request.

    The version *value* is not checked here; a request for another version
    is still built and the dispatcher answers it with ``INVALID_REQUEST``.

    Raises:
        RequestParseError: With code ``INVALID_REQUEST`` when *data* is not
            a request object or a member has the wrong type.
    """
    if not isinstance(data, dict):
        raise RequestParseError(
            error_message_for_code(ErrorCode.INVALID_REQUEST),
            code=ErrorCode.INVALID_REQUEST,
        )

    request_id = _salvage_id(data)

    if not isinstance(data.get("jsonrpc"), str):
        raise RequestParseError(
            "Version (jsonrpc) must be a string.",
            code=ErrorCode.INVALID_REQUEST,
            request_id=request_id,
        )
    if not isinstance(data.get("method"), str):
        raise RequestParseError(
            "Method must be a string.",
            code=ErrorCode.INVALID_REQUEST,
            request_id=request_id,
        )
    if data.get("id") is not None and request_id is None:
        raise RequestParseError(
            "Id must be a string, number or null.",
            code=ErrorCode.INVALID_REQUEST,
        )
    params = data.get("params")
    if params is not None and not isinstance(params, (list, dict)):
        raise RequestParseError(
            "Params must be an array or object.",
            code=ErrorCode.INVALID_REQUEST,
            request_id=request_id,
        )

    try:
        return Request(
            jsonrpc=data["jsonrpc"],
            method=data["method"],
            params=params,
            id=request_id,
            state=state if state is not None else {},
        )
    except ValidationError as exc:
        # Only reachable through nesting deeper than the validator accepts.
        raise RequestParseError(
            error_message_for_code(ErrorCode.INVALID_REQUEST),
            code=ErrorCode.INVALID_REQUEST,
            request_id=request_id,
        ) from exc


def _decode(payload: Payload) -> Any:
    """Decode JSON text, raising ValueError for anything undecodable.

    Nesting deep enough to exhaust the decoder's recursion is reported the
    same way as malformed text.
    """
    try:
        return json.loads(payload)
    except RecursionError as exc:
        raise ValueError("JSON nested too deeply") from exc


def parse_request(text: Payload, state: State | None = None) -> Request:
    """Decode JSON text holding a single request.

    Raises:
        RequestParseError: ``PARSE_ERROR`` for text that is not a JSON
            object (a batch array included), ``INVALID_REQUEST`` for an
            object whose members have the wrong types.
    """
    try:
        data = _decode(text)
    except ValueError as exc:
        raise RequestParseError(
            error_message_for_code(ErrorCode.PARSE_ERROR),
            code=ErrorCode.PARSE_ERROR,
        ) from exc
    if not isinstance(data, dict):
        raise RequestParseError(
            error_message_for_code(ErrorCode.PARSE_ERROR),
            code=ErrorCode.PARSE_ERROR,
        )
    return build_request(data, state)


class BatchProcessor:
    """Turns a raw payload into the list of responses to send back."""

    def __init__(self, dispatcher: Dispatcher, stats: ServerStats) -> None:
        self._dispatcher = dispatcher
        self._stats = stats

    def process(self, payload: Payload, state: State) -> list[Response]:
        """Decode *payload*, dispatch every request in it, collect responses.

        Response order across batch items is unspecified; clients correlate
        by id.
        """
        try:
            data = _decode(payload)
        except ValueError as exc:
            _logger.debug("rpc_payload_rejected", reason="invalid_json", error=str(exc))
            return [self._reject(None, ErrorCode.PARSE_ERROR)]

        if isinstance(data, dict):
            return self._process_one(data, state)

        if not isinstance(data, list):
            _logger.debug(
                "rpc_payload_rejected",
                reason="not_an_object",
                value_type=type(data).__name__,
            )
            return [self._reject(None, ErrorCode.PARSE_ERROR)]

        if not data:
            return [self._reject(None, ErrorCode.INVALID_REQUEST, "Batch is empty.")]

        _logger.debug("rpc_batch_received", batch_size=len(data))
        responses: list[Response] = []
        for item in data:
            responses.extend(self._process_one(item, state))
        return responses

    def _process_one(self, data: Any, state: State) -> list[Response]:
        try:
            request = build_request(data, state)
        except RequestParseError as exc:
            _logger.debug(
                "rpc_payload_rejected",
                reason=exc.message,
                code=exc.code,
                request_id=exc.request_id,
            )
            return [self._reject(exc.request_id, exc.code, exc.message)]
        return self._dispatcher.dispatch(request)

    def _reject(
        self,
        request_id: int | float | str | None,
        code: int,
        message: str = "",
    ) -> Response:
        self._stats.record_rejection()
        return make_error_response(request_id, code, message)


__all__ = ["BatchProcessor", "Payload", "build_request", "parse_request"]
