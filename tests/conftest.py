"""Shared pytest fixtures for lrpc tests."""

from typing import Any

import pytest

from lrpc.rpc.call import Call
from lrpc.rpc.dispatcher import ServeMux
from lrpc.rpc.types import Success


def echo_args(call: Call) -> Any:
    """Handler returning its arguments unchanged."""
    return call.unmarshal_args()


def echo_call(call: Call) -> Success:
    """Handler returning the method name alongside the arguments."""
    return Success({"method": call.method, "args": call.unmarshal_args()})


@pytest.fixture
def echo_mux() -> ServeMux:
    """A mux with "Echo" (returns args) and "EchoCall" (returns method and args)."""
    return ServeMux().handle_func("Echo", echo_args).handle_func("EchoCall", echo_call)
