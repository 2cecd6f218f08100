"""Unit tests for lrpc.rpc.handler and lrpc.rpc.types."""

import asyncio

import pytest

from lrpc.core.errors import DecodeError
from lrpc.rpc.call import Call, DirectCall
from lrpc.rpc.handler import Handler, HandlerFunc, handler_func
from lrpc.rpc.types import Failure, Success, to_result


class TestToResult:
    """Tests for to_result normalization."""

    def test_plain_value(self):
        assert to_result({"a": 1}) == Success({"a": 1})

    def test_none_is_success(self):
        assert to_result(None) == Success(None)

    def test_exception_is_failure(self):
        err = ValueError("bad")
        assert to_result(err) == Failure(err)

    def test_results_pass_through(self):
        success = Success(1)
        failure = Failure(RuntimeError("x"))
        assert to_result(success) is success
        assert to_result(failure) is failure


class TestHandlerFunc:
    """Tests for HandlerFunc."""

    @pytest.mark.asyncio
    async def test_sync_function(self):
        handler = HandlerFunc(lambda call: call.method.upper())
        assert await handler.serve(DirectCall("ping")) == Success("PING")

    @pytest.mark.asyncio
    async def test_async_function(self):
        async def fn(call: Call) -> int:
            await asyncio.sleep(0)
            return call.unmarshal_args(int) * 2

        handler = HandlerFunc(fn)
        assert await handler.serve(DirectCall("double", 21)) == Success(42)

    @pytest.mark.asyncio
    async def test_returned_error_is_failure(self):
        """Returning an exception signals failure without raising."""
        err = RuntimeError("some error")
        handler = HandlerFunc(lambda call: err)
        assert await handler.serve(DirectCall("m")) == Failure(err)

    @pytest.mark.asyncio
    async def test_raised_error_is_failure(self):
        def fn(call: Call) -> None:
            raise KeyError("missing")

        result = await HandlerFunc(fn).serve(DirectCall("m"))
        assert isinstance(result, Failure)
        assert isinstance(result.error, KeyError)

    @pytest.mark.asyncio
    async def test_decode_error_is_failure(self):
        def fn(call: Call) -> None:
            raise DecodeError("bad params")

        result = await HandlerFunc(fn).serve(DirectCall("m"))
        assert isinstance(result, Failure)
        assert result.error.message == "bad params"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        async def fn(call: Call) -> None:
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await HandlerFunc(fn).serve(DirectCall("m"))

    @pytest.mark.asyncio
    async def test_decorator(self):
        @handler_func
        async def ping(call: Call) -> str:
            return "pong"

        assert isinstance(ping, Handler)
        assert await ping.serve(DirectCall("ping")) == Success("pong")
