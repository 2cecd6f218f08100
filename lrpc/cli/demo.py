"""Handlers served by `lrpc serve` when no application is named."""

from typing import Any

from lrpc.rpc.call import Call
from lrpc.rpc.dispatcher import ServeMux


def echo(call: Call) -> Any:
    """Return the call's params unchanged."""
    return call.unmarshal_args()


mux = ServeMux().handle_func("Echo", echo)
mux.handle_func("Methods", lambda call: mux.methods())
