"""lrpc: transport-agnostic RPC handlers, served over HTTP with JSON-RPC 2.0.

Example usage:
    from lrpc import ServeMux, http_handler, json2, run_http_server

    mux = ServeMux().handle_func("Echo", lambda call: call.unmarshal_args())
    await run_http_server(http_handler(json2.Codec(), mux), port=8765)
"""

from lrpc.core import Context, ContextKey, DecodeError, LrpcError, NotAssignableError
from lrpc.http import (
    Codec,
    HttpRequest,
    ResponseWriter,
    context_request,
    context_response_writer,
    http_handler,
    run_http_server,
    start_http_server,
)
from lrpc.http import json2
from lrpc.rpc import (
    ERR_METHOD_NOT_FOUND,
    Call,
    DirectCall,
    Failure,
    Handler,
    HandlerFunc,
    Result,
    ServeMux,
    Success,
    handler_func,
)

__version__ = "0.1.0"

__all__ = [
    # Calls and handlers
    "Call",
    "DirectCall",
    "Handler",
    "HandlerFunc",
    "handler_func",
    "ServeMux",
    "ERR_METHOD_NOT_FOUND",
    "Result",
    "Success",
    "Failure",
    # Context
    "Context",
    "ContextKey",
    # HTTP
    "Codec",
    "HttpRequest",
    "ResponseWriter",
    "http_handler",
    "context_request",
    "context_response_writer",
    "run_http_server",
    "start_http_server",
    "json2",
    # Errors
    "LrpcError",
    "DecodeError",
    "NotAssignableError",
]
