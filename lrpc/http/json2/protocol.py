"""JSON-RPC 2.0 protocol parsing and serialization."""

from __future__ import annotations

import json
import re
import secrets
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from lrpc.core.errors import EncodeError, LrpcError
from lrpc.http.json2.types import (
    SERVER_ERROR,
    VERSION,
    JsonRpcError,
    RawMessage,
    Request,
    Response,
)
from lrpc.rpc.types import Failure, Result, to_result


class ParseError(LrpcError):
    """Raised when a JSON-RPC message can't be parsed."""


_WHITESPACE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _parse_object(text: str, what: str) -> tuple[dict[str, Any], dict[str, RawMessage]]:
    """Parse a JSON object, returning its values and the raw text of each member.

    Raises:
        ParseError: If text is not valid JSON or not an object.
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"{what} must be a JSON object")

    # Second pass over text that is known to be a well-formed object
    raw: dict[str, RawMessage] = {}
    idx = _skip(text, _skip(text, 0) + 1)
    if text[idx] == "}":
        return data, raw
    while True:
        key, idx = _decoder.raw_decode(text, idx)
        idx = _skip(text, _skip(text, idx) + 1)  # ':'
        _value, end = _decoder.raw_decode(text, idx)
        raw[key] = RawMessage(text[idx:end])
        idx = _skip(text, end)
        if text[idx] == "}":
            return data, raw
        idx = _skip(text, idx + 1)  # ','


def encode_value(value: Any) -> str:
    """Encode a value as compact JSON text.

    RawMessage values are inserted verbatim. Everything else goes through
    pydantic's to_jsonable_python, so dataclasses, models, sets and datetimes
    are accepted.

    Raises:
        EncodeError: If the value can't be represented as JSON.
    """
    if isinstance(value, RawMessage):
        return str(value)
    try:
        return json.dumps(to_jsonable_python(value), separators=(",", ":"))
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodeError(f"Cannot encode {type(value).__name__} as JSON: {e}") from e


# === Server-side functions ===


def parse_request(text: str) -> Request:
    """Parse a request body into a JSON-RPC 2.0 Request.

    Only the shape is checked: the body must be a single JSON object whose
    "method" is a string. "params" and "id" are kept as raw JSON text and
    "jsonrpc", if present, must be a string.

    Args:
        text: The request body.

    Returns:
        A parsed Request object.

    Raises:
        ParseError: If the JSON is invalid or the fields have the wrong type.
    """
    data, raw = _parse_object(text, "Request")

    method = data.get("method")
    if not isinstance(method, str):
        raise ParseError(f"method must be a string, got: {type(method).__name__}")

    jsonrpc = data.get("jsonrpc", "")
    if not isinstance(jsonrpc, str):
        raise ParseError(f"jsonrpc must be a string, got: {type(jsonrpc).__name__}")

    return Request(
        method=method,
        params=raw.get("params"),
        id=raw.get("id"),
        jsonrpc=jsonrpc,
    )


def make_response(request_id: RawMessage | None, result: Result) -> Response:
    """Build the Response for a handler's result.

    A Failure holding a JsonRpcError is sent as is; any other Failure is
    wrapped with code SERVER_ERROR and the error's text as message.

    Args:
        request_id: The raw id from the original request.
        result: The handler's result.

    Returns:
        A Response with exactly one of result or error populated.
    """
    result = to_result(result)
    if isinstance(result, Failure):
        error = result.error
        if not isinstance(error, JsonRpcError):
            error = JsonRpcError(SERVER_ERROR, str(error))
        return Response(id=request_id, error=error)
    return Response(id=request_id, result=result.value)


def serialize_response(response: Response) -> str:
    """Serialize a Response to a single line of JSON (no trailing newline).

    The id is written verbatim, or as null when absent. "result" is written
    only when there is no error, and is written even when it is null.

    Raises:
        EncodeError: If the result or error data can't be encoded.
    """
    if response.error is not None:
        payload = f'"error":{encode_value(response.error.to_dict())}'
    else:
        payload = f'"result":{encode_value(response.result)}'
    request_id = response.id if response.id is not None else "null"
    return f'{{"jsonrpc":{json.dumps(response.jsonrpc)},{payload},"id":{request_id}}}'


# === Client-side functions ===


def new_request(method: str, params: Any = None) -> Request:
    """Build an outbound Request with a random id.

    The id is 16 random bytes, hex encoded, sent as a JSON string.

    Args:
        method: The method to call.
        params: Parameters for the method; None leaves them out.

    Raises:
        EncodeError: If params can't be encoded.
    """
    request_id = RawMessage(json.dumps(secrets.token_hex(16)))
    raw_params = RawMessage(encode_value(params)) if params is not None else None
    return Request(method=method, params=raw_params, id=request_id, jsonrpc=VERSION)


def serialize_request(request: Request) -> str:
    """Serialize a Request to a single line of JSON (no trailing newline)."""
    parts = [f'"jsonrpc":{json.dumps(request.jsonrpc)}', f'"method":{json.dumps(request.method)}']
    if request.params is not None:
        parts.append(f'"params":{request.params}')
    parts.append(f'"id":{request.id if request.id is not None else "null"}')
    return "{" + ",".join(parts) + "}"


def parse_response(text: str) -> Response:
    """Parse a JSON-RPC 2.0 Response.

    The result is kept as raw JSON text so the caller can decode it into
    the type it expects. A response with neither "result" nor "error" is
    read as a null result.

    Raises:
        ParseError: If the JSON is invalid or the response is malformed.
    """
    data, raw = _parse_object(text, "Response")

    if "id" not in raw:
        raise ParseError("Response must have 'id' field")

    has_result = "result" in raw
    has_error = data.get("error") is not None
    if has_result and has_error:
        raise ParseError("Response cannot have both 'result' and 'error'")
    if not has_result and not has_error:
        # Servers that drop null members send a null result this way
        raw["result"] = RawMessage("null")

    error: JsonRpcError | None = None
    if has_error:
        error_data = data["error"]
        if not isinstance(error_data, dict):
            raise ParseError(f"error must be an object, got: {type(error_data).__name__}")
        code = error_data.get("code")
        message = error_data.get("message")
        if not isinstance(code, int) or isinstance(code, bool) or not isinstance(message, str):
            raise ParseError("error must have an integer 'code' and a string 'message'")
        error = JsonRpcError(code, message, error_data.get("data"))

    return Response(
        id=raw["id"],
        result=raw.get("result"),
        error=error,
        jsonrpc=data.get("jsonrpc", ""),
    )
