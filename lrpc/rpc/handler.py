"""Handlers: the unit of RPC logic.

A Handler takes a Call and returns a Result. Success values and errors share
that single return channel; the dispatch machinery never raises to report a
handler failure.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from lrpc.core.errors import LrpcError
from lrpc.rpc.call import Call
from lrpc.rpc.types import Failure, Result, to_result

logger = logging.getLogger(__name__)

# A plain function usable as a handler. It may be sync or async and may
# return a Result, an exception instance, or any other value.
HandlerFn = Callable[[Call], Any]


@runtime_checkable
class Handler(Protocol):
    """Processes an incoming call and returns a result for it."""

    async def serve(self, call: Call) -> Result: ...


class HandlerFunc:
    """Adapter that lets a plain function act as a Handler.

    The function's return value is normalized with to_result(). An exception
    raised inside the function (for example a DecodeError from
    unmarshal_args) is returned as a Failure rather than propagated.
    Cancellation is not intercepted.

    Example:
        echo = HandlerFunc(lambda call: call.unmarshal_args())
    """

    def __init__(self, fn: HandlerFn) -> None:
        self._fn = fn

    def __repr__(self) -> str:
        return f"HandlerFunc({getattr(self._fn, '__qualname__', self._fn)!r})"

    async def serve(self, call: Call) -> Result:
        try:
            value = self._fn(call)
            if inspect.isawaitable(value):
                value = await value
        except LrpcError as e:
            logger.debug("Handler for '%s' failed: %s", call.method, e)
            return Failure(e)
        except Exception as e:
            logger.error(
                "Unexpected error in handler for '%s': %s",
                call.method,
                e,
                exc_info=True,
            )
            return Failure(e)
        return to_result(value)


def handler_func(fn: HandlerFn) -> HandlerFunc:
    """Decorator form of HandlerFunc.

    Example:
        @handler_func
        async def ping(call: Call) -> str:
            return "pong"
    """
    return HandlerFunc(fn)
