"""JSON-RPC 2.0 codec for the HTTP bridge.

    handler = http_handler(Codec(), mux)

Every request body is one JSON-RPC 2.0 request object. A body that isn't
one is rejected by the bridge with HTTP 400 before any handler runs; all
handler outcomes, errors included, are sent as JSON-RPC responses with
the transport's default 200 status.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from lrpc.core.context import Context, ContextKey
from lrpc.core.errors import CodecError, DecodeError
from lrpc.http.bridge import context_response_writer
from lrpc.http.json2.protocol import make_response, parse_request, serialize_response
from lrpc.http.json2.types import Request
from lrpc.http.server import HttpRequest, ResponseWriter
from lrpc.rpc.call import ArgsOnce, Call, describe_validation_error
from lrpc.rpc.types import Result

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json; charset=utf-8"

_REQUEST_KEY: ContextKey[Request] = ContextKey("lrpc.json2.request")


def context_rpc_request(ctx: Context) -> Request | None:
    """Return the parsed Request behind a call's context, or None.

    Only contexts of calls created by Codec carry one. Handlers can use it to
    read the original id or the raw params.
    """
    return ctx.value(_REQUEST_KEY)


class JsonRpcCall(ArgsOnce):
    """A Call backed by a parsed JSON-RPC 2.0 request."""

    def __init__(self, context: Context, request: Request) -> None:
        self._context = context
        self._request = request

    def __repr__(self) -> str:
        return f"JsonRpcCall(method={self._request.method!r}, id={self._request.id!r})"

    @property
    def context(self) -> Context:
        return self._context

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def request(self) -> Request:
        return self._request

    def unmarshal_args(self, target: Any = Any) -> Any:
        """Decode the raw params into an instance of target.

        Decoding is strict: JSON types must match the target's field types.
        Missing params decode as null.

        Raises:
            DecodeError: If the params don't fit target, or were already consumed.
        """
        self._consume_args()
        raw = self._request.params if self._request.params is not None else "null"
        try:
            adapter = TypeAdapter(target)
        except PydanticSchemaGenerationError as e:
            raise DecodeError(f"Cannot decode params for '{self.method}' into {target!r}") from e
        try:
            return adapter.validate_json(raw, strict=True)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid params for '{self.method}': {describe_validation_error(e)}"
            ) from e


class Codec:
    """Codec speaking JSON-RPC 2.0 over HTTP request and response bodies."""

    async def new_call(
        self, ctx: Context, writer: ResponseWriter, request: HttpRequest
    ) -> Call:
        """Parse the request body into a call.

        Raises:
            ParseError: If the body is not a JSON-RPC 2.0 request object.
        """
        rpc_request = parse_request(request.body)
        logger.debug("JSON-RPC call: method=%s, id=%s", rpc_request.method, rpc_request.id)
        return JsonRpcCall(ctx.with_value(_REQUEST_KEY, rpc_request), rpc_request)

    async def respond(self, call: Call, result: Result) -> None:
        """Write the JSON-RPC response for result, echoing the request id.

        Raises:
            CodecError: If the call was not created by this codec through
                the HTTP bridge.
            EncodeError: If the result can't be encoded as JSON.
        """
        rpc_request = context_rpc_request(call.context)
        if rpc_request is None:
            raise CodecError("call was not created by the JSON-RPC 2.0 codec")
        writer = context_response_writer(call.context)
        if writer is None:
            raise CodecError("call context has no response writer")

        body = serialize_response(make_response(rpc_request.id, result))
        writer.headers["Content-Type"] = CONTENT_TYPE
        writer.write(body + "\n")
