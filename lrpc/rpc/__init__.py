"""Transport-independent RPC: calls, handlers and method routing."""

from lrpc.rpc.call import Call, DirectCall
from lrpc.rpc.dispatcher import ERR_METHOD_NOT_FOUND, ServeMux
from lrpc.rpc.handler import Handler, HandlerFn, HandlerFunc, handler_func
from lrpc.rpc.types import Failure, Result, Success, to_result

__all__ = [
    # Calls
    "Call",
    "DirectCall",
    # Handlers
    "Handler",
    "HandlerFn",
    "HandlerFunc",
    "handler_func",
    # Routing
    "ServeMux",
    "ERR_METHOD_NOT_FOUND",
    # Results
    "Result",
    "Success",
    "Failure",
    "to_result",
]
