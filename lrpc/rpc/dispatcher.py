"""Method-name routing of calls to handlers."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from lrpc.core.errors import MethodNotFoundError
from lrpc.rpc.call import Call
from lrpc.rpc.handler import Handler, HandlerFn, HandlerFunc
from lrpc.rpc.types import Failure, Result

logger = logging.getLogger(__name__)

# Returned (as a Failure) for every call whose method has no handler
ERR_METHOD_NOT_FOUND = MethodNotFoundError("method not found")


class ServeMux:
    """Routes calls to the Handler registered for their method name.

    Matching is by exact string; there are no wildcards or prefixes. A
    ServeMux is itself a Handler, so muxes can be nested or wrapped.

    Registration is not synchronized. Register everything before serving.

    Example:
        mux = ServeMux().handle("foo", foo_handler).handle_func("bar", bar)

        mux = ServeMux({"foo": foo_handler, "bar": bar_handler})
    """

    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self._handlers: dict[str, Handler] = dict(handlers or {})

    def __contains__(self, method: object) -> bool:
        return method in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __repr__(self) -> str:
        return f"ServeMux(methods={sorted(self._handlers)!r})"

    def methods(self) -> list[str]:
        """Return the registered method names, sorted."""
        return sorted(self._handlers)

    def handle(self, method: str, handler: Handler) -> ServeMux:
        """Register handler for method, replacing any previous one.

        Returns:
            This mux, so registrations can be chained.
        """
        if method in self._handlers:
            logger.debug("Replacing handler for method '%s'", method)
        self._handlers[method] = handler
        return self

    def handle_func(self, method: str, fn: HandlerFn) -> ServeMux:
        """Like handle(), but wraps fn in a HandlerFunc."""
        return self.handle(method, HandlerFunc(fn))

    async def serve(self, call: Call) -> Result:
        """Delegate the call to its method's handler.

        Returns:
            The handler's result, or Failure(ERR_METHOD_NOT_FOUND) when no
            handler is registered for call.method.
        """
        handler = self._handlers.get(call.method)
        if handler is None:
            logger.debug("No handler for method '%s'", call.method)
            return Failure(ERR_METHOD_NOT_FOUND)
        return await handler.serve(call)
