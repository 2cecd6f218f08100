"""Async HTTP client for JSON-RPC 2.0 endpoints."""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from lrpc.core.errors import LrpcError
from lrpc.http.json2.codec import CONTENT_TYPE
from lrpc.http.json2.protocol import (
    ParseError,
    new_request,
    parse_response,
    serialize_request,
)
from lrpc.rpc.call import describe_validation_error

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8765/"


class ClientError(LrpcError):
    """Exception for client-side errors (connection, timeout, protocol)."""


class RpcClient:
    """Async HTTP client for JSON-RPC 2.0 servers.

    One HTTP request per call; there are no retries. JSON-RPC error
    responses are raised as JsonRpcError, everything else that goes wrong
    as ClientError.

    Usage:
        async with RpcClient("http://127.0.0.1:8765/") as client:
            result = await client.call("Echo", {"foo": "bar"})
    """

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 60.0) -> None:
        """Initialize the client.

        Args:
            url: URL the JSON-RPC requests are POSTed to.
            timeout: Request timeout in seconds.
        """
        self._url = url
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        logger.debug("RpcClient initialized: url=%s, timeout=%s", url, timeout)

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> "RpcClient":
        """Enter async context, create httpx client."""
        self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context, close httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, params: Any = None, result_type: Any = Any) -> Any:
        """Call a remote method and return its decoded result.

        Args:
            method: The RPC method name.
            params: Parameters for the method; None leaves them out.
            result_type: Type the result is validated into.

        Returns:
            The result, decoded as result_type.

        Raises:
            JsonRpcError: If the server answered with a JSON-RPC error.
            ClientError: On connection error, timeout, or protocol error.
        """
        if self._client is None:
            raise ClientError("Client not initialized. Use 'async with' context manager.")

        request = new_request(method, params)
        logger.debug("RPC call: method=%s, id=%s", method, request.id)
        try:
            response = await self._client.post(
                self._url,
                content=serialize_request(request),
                headers={"Content-Type": CONTENT_TYPE},
            )
        except httpx.ConnectError as e:
            logger.warning("Connection failed to %s: %s", self._url, e)
            raise ClientError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("Request timed out: method=%s, timeout=%s", method, self._timeout)
            raise ClientError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP error: {e}") from e

        if response.status_code != 200:
            raise ClientError(f"HTTP {response.status_code}: {response.text.strip()}")

        try:
            rpc_response = parse_response(response.text)
        except ParseError as e:
            raise ClientError(f"Invalid response: {e}") from e

        if rpc_response.id != request.id:
            raise ClientError(
                f"Response id {rpc_response.id} does not match request id {request.id}"
            )
        if rpc_response.error is not None:
            raise rpc_response.error

        try:
            return TypeAdapter(result_type).validate_json(rpc_response.result)
        except ValidationError as e:
            raise ClientError(
                f"Unexpected result for '{method}': {describe_validation_error(e)}"
            ) from e
