"""Translation between HTTP requests and RPC calls.

The HTTP side and the RPC side meet through a Codec, which implements the
wire protocol: it turns an incoming request into a Call and writes the
handler's result back as a response. http_handler() ties a codec and an RPC
handler together into an HTTP handler for the server:

    handler = http_handler(json2.Codec(), mux)
    await run_http_server(handler, port=8765)
"""

from __future__ import annotations

import logging
from typing import Protocol

from lrpc.core.context import Context, ContextKey
from lrpc.http.server import HttpHandler, HttpRequest, ResponseWriter, http_error
from lrpc.rpc.call import Call
from lrpc.rpc.handler import Handler
from lrpc.rpc.types import Result

logger = logging.getLogger(__name__)

_REQUEST_KEY: ContextKey[HttpRequest] = ContextKey("lrpc.http.request")
_RESPONSE_WRITER_KEY: ContextKey[ResponseWriter] = ContextKey("lrpc.http.response_writer")


class Codec(Protocol):
    """Translates HTTP requests into calls and results into HTTP responses."""

    async def new_call(
        self, ctx: Context, writer: ResponseWriter, request: HttpRequest
    ) -> Call:
        """Build a Call for an incoming request.

        The returned call's context must be ctx or derived from it. Raising
        makes the bridge answer 400 with the exception's message.
        """
        ...

    async def respond(self, call: Call, result: Result) -> None:
        """Encode result onto the call's response.

        context_response_writer(call.context) gives the ResponseWriter.
        Raising makes the bridge attempt a 500 with the exception's message.
        """
        ...


def http_handler(codec: Codec, handler: Handler) -> HttpHandler:
    """Build an HTTP handler serving handler through codec.

    Per request: derive the request context and attach the request and the
    response writer to it, ask the codec for a call (400 on failure), serve
    the call, and ask the codec to respond (best-effort 500 on failure).
    """

    async def serve_http(request: HttpRequest, writer: ResponseWriter) -> None:
        ctx = request.context
        ctx = ctx.with_value(_REQUEST_KEY, request)
        ctx = ctx.with_value(_RESPONSE_WRITER_KEY, writer)

        try:
            call = await codec.new_call(ctx, writer, request)
        except Exception as e:
            logger.debug("Rejecting request to %s: %s", request.path, e)
            http_error(writer, str(e), 400)
            return

        result = await handler.serve(call)

        try:
            await codec.respond(call, result)
        except Exception as e:
            # The response may already be partly written; this is best effort
            logger.warning("Failed to respond to '%s': %s", call.method, e)
            http_error(writer, str(e), 500)

    return serve_http


def context_request(ctx: Context) -> HttpRequest | None:
    """Return the HttpRequest behind a context built by http_handler, or None."""
    return ctx.value(_REQUEST_KEY)


def context_response_writer(ctx: Context) -> ResponseWriter | None:
    """Return the ResponseWriter behind a context built by http_handler, or None."""
    return ctx.value(_RESPONSE_WRITER_KEY)
