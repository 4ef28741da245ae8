"""JSON-RPC 2.0 message models.

Pydantic v2 models for requests, responses and error objects, plus the
free-standing constructors and the client-side response decoder. Models
are frozen: a Request or Response never changes after construction.

Wire shapes:

    {"jsonrpc":"2.0","method":"subtract","params":[42,23],"id":1}
    {"jsonrpc":"2.0","id":1,"result":19}
    {"jsonrpc":"2.0","id":1,"error":{"code":-32601,"message":"Method not found"}}
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    SerializerFunctionWrapHandler,
    SkipValidation,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    model_serializer,
    model_validator,
)

from rpcengine.errors import ErrorCode, error_message_for_code
from rpcengine.exceptions import ResponseParseError

SUPPORTED_VERSION = "2.0"

# A request id is a string, a number, or None (absent/null marks a notification).
RequestId = StrictInt | StrictFloat | StrictStr | None

# Positional (list) or named (dict) parameters, or None when omitted.
Params = list[JsonValue] | dict[str, JsonValue] | None

# Per-call state supplied by the caller; never serialized.
State = dict[str, Any]


class ErrorDetail(BaseModel):
    """Error object within a JSON-RPC error response."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: Any = None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.data is None:
            data.pop("data", None)
        return data


class Request(BaseModel):
    """Inbound JSON-RPC 2.0 request.

    When ``id`` is None the request is a *notification*: it is dispatched
    normally but never produces a response.

    ``jsonrpc`` is deliberately a plain string: a request carrying another
    version is still a Request, and the server answers it with
    ``INVALID_REQUEST``.

    ``state`` is a per-call mapping supplied by the caller of
    ``Server.handle_with_state``. It is shared, not copied, across every
    item of a batch, and it is excluded from serialization.
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = SUPPORTED_VERSION
    method: str
    params: Params = None
    id: RequestId = None
    state: SkipValidation[State] = Field(default_factory=dict, exclude=True, repr=False)

    @property
    def is_notification(self) -> bool:
        """True when the request carries no id."""
        return self.id is None

    def get_state(self, key: str, default: Any = None) -> Any:
        """Return one value from the per-call state, or *default*."""
        return self.state.get(key, default)

    # -- Responder ----------------------------------------------------------

    def success_response(self, result: Any) -> Response:
        """Build a success response bound to this request's id."""
        return make_success_response(self.id, result)

    def error_response(self, code: int, message: str = "", data: Any = None) -> Response:
        """Build an error response bound to this request's id.

        An empty *message* is replaced by the canonical message for *code*.
        """
        return make_error_response(self.id, code, message, data)

    def server_error_response(self, exc: BaseException) -> Response:
        """Build a ``SERVER_ERROR`` response carrying ``str(exc)`` as message.

        Use this for domain errors whose text is safe to show a client.
        Unhandled exceptions escaping a handler are never reported this way.
        """
        return make_server_error_response(self.id, exc)

    # -- Serialization ------------------------------------------------------

    def to_json(self) -> str:
        """Encode as compact JSON text.

        ``params`` is omitted when absent and ``id`` is omitted for
        notifications.
        """
        exclude: set[str] = set()
        if self.params is None:
            exclude.add("params")
        if self.id is None:
            exclude.add("id")
        return self.model_dump_json(exclude=exclude)

    def __str__(self) -> str:
        return self.to_json()


class Response(BaseModel):
    """Outbound JSON-RPC 2.0 response.

    Exactly one of ``result`` and ``error`` is meaningful: a response whose
    ``error`` is None is a success, and its ``result`` may legitimately be
    None (serialized as ``"result": null``).
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = SUPPORTED_VERSION
    id: RequestId
    result: Any = None
    error: ErrorDetail | None = None

    @model_validator(mode="before")
    @classmethod
    def _check_members(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "id" not in data:
            raise ValueError("response must have an 'id' member")
        has_result = "result" in data
        has_error = data.get("error") is not None
        if has_result and has_error:
            raise ValueError("response cannot have both 'result' and 'error'")
        if not has_result and not has_error:
            raise ValueError("response must have either 'result' or 'error'")
        return data

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.error is None:
            data.pop("error", None)
        else:
            data.pop("result", None)
        return data

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def error_code(self) -> int:
        """The error code, or ``ErrorCode.SUCCESS`` when no error is set."""
        if self.error is None:
            return ErrorCode.SUCCESS
        return self.error.code

    @property
    def error_message(self) -> str:
        """The error message, or an empty string when no error is set."""
        if self.error is None:
            return ""
        return self.error.message

    def to_json(self) -> str:
        """Encode as compact JSON text."""
        return self.model_dump_json()

    def __str__(self) -> str:
        return self.to_json()


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def make_success_response(request_id: int | float | str | None, result: Any) -> Response:
    """Create a success response for *request_id*."""
    return Response(id=request_id, result=result)


def make_error_response(
    request_id: int | float | str | None,
    code: int,
    message: str = "",
    data: Any = None,
) -> Response:
    """Create an error response for *request_id*.

    Args:
        request_id: The id from the original request (None if unknown).
        code: JSON-RPC error code. Codes in the server error band are free
            for the application to assign.
        message: Human-readable description. Must not contain sensitive
            details. Empty means "use error_message_for_code(code)".
        data: Optional structured detail for the client.
    """
    if not message:
        message = error_message_for_code(code)
    return Response(
        id=request_id,
        error=ErrorDetail(code=code, message=message, data=data),
    )


def make_server_error_response(
    request_id: int | float | str | None,
    exc: BaseException,
) -> Response:
    """Convert an exception into a ``SERVER_ERROR`` response using its text."""
    return make_error_response(request_id, ErrorCode.SERVER_ERROR, str(exc))


def generate_request_id() -> str:
    """Return a random 32-digit hexadecimal id for outgoing requests."""
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Response lists
# ---------------------------------------------------------------------------

_RESPONSE_LIST = TypeAdapter(list[Response])


def serialize_responses(responses: Iterable[Response]) -> str:
    """Encode responses as a compact JSON array ("[]" when empty)."""
    return _RESPONSE_LIST.dump_json(list(responses)).decode()


def parse_responses(data: str | bytes | bytearray) -> list[Response]:
    """Decode one response object or an array of them.

    Raises:
        ResponseParseError: If the text is not JSON, or any member is not a
            well-formed response.
    """
    try:
        raw = json.loads(data)
    except (ValueError, RecursionError) as exc:
        raise ResponseParseError(f"Invalid JSON: {exc}") from exc

    try:
        if isinstance(raw, list):
            return _RESPONSE_LIST.validate_python(raw)
        return [Response.model_validate(raw)]
    except ValidationError as exc:
        raise ResponseParseError(f"Invalid response: {exc}") from exc


__all__ = [
    "SUPPORTED_VERSION",
    "ErrorDetail",
    "Params",
    "Request",
    "RequestId",
    "Response",
    "State",
    "generate_request_id",
    "make_error_response",
    "make_server_error_response",
    "make_success_response",
    "parse_responses",
    "serialize_responses",
]
