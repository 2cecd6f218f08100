"""JSON-RPC 2.0 wire types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lrpc.core.errors import LrpcError

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000  # Server error range: -32000 to -32099

VERSION = "2.0"


class RawMessage(str):
    """A JSON value kept as its original text.

    Request ids and params are carried this way so they can be echoed back
    or decoded later without ever being normalized.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"RawMessage({str.__repr__(self)})"


class JsonRpcError(LrpcError):
    """An error carrying a JSON-RPC 2.0 error code.

    Returned from a handler (as a Failure, or raised inside a HandlerFunc),
    it is sent to the client exactly as built. Any other error is sent with
    code SERVER_ERROR and the error's text as message.

    Attributes:
        code: Number indicating the error type.
        message: Short, single-sentence description of the error.
        data: Optional primitive or structured value with more detail.
    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(message)

    def __repr__(self) -> str:
        return f"JsonRpcError(code={self.code}, message={self.message!r}, data={self.data!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, leaving out data when it is None."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


@dataclass
class Request:
    """JSON-RPC 2.0 request.

    Attributes:
        method: Name of the method to invoke.
        params: Raw JSON text of the parameters, or None if absent.
        id: Raw JSON text of the request id (string, number or null), or
            None if absent. Not type-checked; echoed back verbatim.
        jsonrpc: Protocol version as sent by the client.
    """

    method: str
    params: RawMessage | None = None
    id: RawMessage | None = None
    jsonrpc: str = VERSION


@dataclass
class Response:
    """JSON-RPC 2.0 response.

    Attributes:
        id: Raw id from the original request; None is sent as null.
        result: Result of the method call (mutually exclusive with error).
            On the client side this is the raw JSON text of the result.
        error: Error if the method failed (mutually exclusive with result).
        jsonrpc: Protocol version, always "2.0".
    """

    id: RawMessage | None
    result: Any = None
    error: JsonRpcError | None = None
    jsonrpc: str = VERSION
