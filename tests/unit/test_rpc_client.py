"""Unit tests for RpcClient, using httpx.MockTransport in place of a server."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from lrpc.client import ClientError, RpcClient
from lrpc.http.json2 import JsonRpcError


@dataclass
class Sum:
    total: int


def reply(result: Any = None, error: dict | None = None) -> Callable[[httpx.Request], httpx.Response]:
    """Build a transport handler answering every request with result or error."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if error is not None:
            payload["error"] = error
        else:
            payload["result"] = result
        return httpx.Response(200, text=json.dumps(payload))

    return handler


def use_transport(client: RpcClient, handler: Callable[[httpx.Request], httpx.Response]) -> None:
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestRpcClient:
    """Tests for RpcClient.call."""

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        """Calling outside 'async with' raises ClientError."""
        client = RpcClient()
        with pytest.raises(ClientError, match="not initialized"):
            await client.call("Echo")

    @pytest.mark.asyncio
    async def test_sends_json_rpc_request(self):
        """The request body is a JSON-RPC 2.0 request with a string id."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return reply(result="ok")(request)

        async with RpcClient("http://test/rpc") as client:
            use_transport(client, handler)
            assert await client.call("Echo", {"foo": "bar"}) == "ok"

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://test/rpc"
        assert request.headers["content-type"].startswith("application/json")
        body = json.loads(request.content)
        assert body["jsonrpc"] == "2.0"
        assert body["method"] == "Echo"
        assert body["params"] == {"foo": "bar"}
        assert isinstance(body["id"], str)

    @pytest.mark.asyncio
    async def test_omits_absent_params(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return reply(result=None)(request)

        async with RpcClient() as client:
            use_transport(client, handler)
            assert await client.call("Ping") is None

        assert "params" not in seen[0]

    @pytest.mark.asyncio
    async def test_omitted_result_is_none(self):
        """A server that leaves out a null result is understood."""

        def handler(request: httpx.Request) -> httpx.Response:
            request_id = json.loads(request.content)["id"]
            return httpx.Response(200, text=json.dumps({"jsonrpc": "2.0", "id": request_id}))

        async with RpcClient() as client:
            use_transport(client, handler)
            assert await client.call("Ping") is None

    @pytest.mark.asyncio
    async def test_decodes_result_type(self):
        async with RpcClient() as client:
            use_transport(client, reply(result={"total": 3}))
            assert await client.call("Add", [1, 2], result_type=Sum) == Sum(total=3)

    @pytest.mark.asyncio
    async def test_unexpected_result_type(self):
        async with RpcClient() as client:
            use_transport(client, reply(result="three"))
            with pytest.raises(ClientError, match="Unexpected result"):
                await client.call("Add", [1, 2], result_type=int)

    @pytest.mark.asyncio
    async def test_error_response_raises_rpc_error(self):
        """JSON-RPC errors surface as JsonRpcError with code, message and data."""
        error = {"code": -32000, "message": "method not found", "data": {"method": "X"}}
        async with RpcClient() as client:
            use_transport(client, reply(error=error))
            with pytest.raises(JsonRpcError) as exc_info:
                await client.call("X")

        assert exc_info.value.code == -32000
        assert exc_info.value.message == "method not found"
        assert exc_info.value.data == {"method": "X"}

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="Invalid JSON\n")

        async with RpcClient() as client:
            use_transport(client, handler)
            with pytest.raises(ClientError, match="HTTP 400: Invalid JSON"):
                await client.call("Echo")

    @pytest.mark.asyncio
    async def test_invalid_response_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json")

        async with RpcClient() as client:
            use_transport(client, handler)
            with pytest.raises(ClientError, match="Invalid response"):
                await client.call("Echo")

    @pytest.mark.asyncio
    async def test_mismatched_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text='{"jsonrpc":"2.0","result":1,"id":"other"}')

        async with RpcClient() as client:
            use_transport(client, handler)
            with pytest.raises(ClientError, match="does not match"):
                await client.call("Echo")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with RpcClient() as client:
            use_transport(client, handler)
            with pytest.raises(ClientError, match="Connection failed"):
                await client.call("Echo")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with RpcClient() as client:
            use_transport(client, handler)
            with pytest.raises(ClientError, match="timed out"):
                await client.call("Echo")

    @pytest.mark.asyncio
    async def test_exit_closes_client(self):
        client = RpcClient()
        async with client:
            assert client._client is not None
        assert client._client is None
