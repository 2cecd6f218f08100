"""JSON-RPC 2.0 codec for lrpc's HTTP bridge.

Example usage:
    mux = ServeMux().handle_func("Echo", lambda call: call.unmarshal_args())
    handler = http_handler(json2.Codec(), mux)

    curl -X POST http://localhost:8765/ \\
        -d '{"jsonrpc":"2.0","method":"Echo","params":{"foo":"bar"},"id":"1"}'
"""

from lrpc.http.json2.codec import CONTENT_TYPE, Codec, JsonRpcCall, context_rpc_request
from lrpc.http.json2.protocol import (
    ParseError,
    encode_value,
    make_response,
    new_request,
    parse_request,
    parse_response,
    serialize_request,
    serialize_response,
)
from lrpc.http.json2.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    VERSION,
    JsonRpcError,
    RawMessage,
    Request,
    Response,
)

__all__ = [
    # Types
    "Request",
    "Response",
    "RawMessage",
    "JsonRpcError",
    "VERSION",
    # Codec
    "Codec",
    "JsonRpcCall",
    "CONTENT_TYPE",
    "context_rpc_request",
    # Protocol functions (server-side)
    "parse_request",
    "make_response",
    "serialize_response",
    "encode_value",
    # Protocol functions (client-side)
    "new_request",
    "serialize_request",
    "parse_response",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
    # Exceptions
    "ParseError",
]
