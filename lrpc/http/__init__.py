"""HTTP transport and the bridge between HTTP requests and RPC calls."""

from lrpc.http.bridge import Codec, context_request, context_response_writer, http_handler
from lrpc.http.server import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    MAX_BODY_SIZE,
    HttpHandler,
    HttpParseError,
    HttpRequest,
    ResponseWriter,
    handle_connection,
    http_error,
    read_http_request,
    run_http_server,
    send_http_response,
    start_http_server,
)

__all__ = [
    # Bridge
    "Codec",
    "http_handler",
    "context_request",
    "context_response_writer",
    # Transport
    "HttpHandler",
    "HttpRequest",
    "ResponseWriter",
    "http_error",
    "read_http_request",
    "send_http_response",
    "handle_connection",
    "start_http_server",
    "run_http_server",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "MAX_BODY_SIZE",
    # Exceptions
    "HttpParseError",
]
