"""Pure asyncio HTTP server for serving RPC handlers.

This module provides a minimal HTTP/1.1 server: one request per connection,
bounded header and body sizes, buffered responses. It uses only asyncio
stdlib; anything protocol-specific lives in the codec behind the HTTP
handler it serves.

An HTTP handler is a coroutine function taking the parsed request and a
ResponseWriter. The writer buffers status, headers and body; the server
sends them once the handler returns.

Example usage:
    handler = http_handler(json2.Codec(), mux)
    await run_http_server(handler, host="127.0.0.1", port=8765)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from lrpc.core.cancel import CancellationToken
from lrpc.core.context import Context
from lrpc.core.errors import LrpcError

logger = logging.getLogger(__name__)

# Constants
DEFAULT_PORT = 8765
DEFAULT_HOST = "127.0.0.1"
MAX_BODY_SIZE = 1_048_576  # 1MB
READ_TIMEOUT = 30.0

# HTTP header limits (DoS protection)
MAX_HEADERS_COUNT = 128
MAX_HEADER_NAME_LEN = 1024
MAX_HEADER_VALUE_LEN = 8192
MAX_TOTAL_HEADERS_SIZE = 32 * 1024
MAX_REQUEST_LINE_LEN = 8192

STATUS_MESSAGES = {
    200: "OK",
    204: "No Content",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


@dataclass
class HttpRequest:
    """Parsed HTTP request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path (e.g., "/rpc")
        headers: Dict of lowercase header names to values
        body: Request body as string
        context: Transport context; cancelled once the connection is done
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    context: Context = field(default_factory=Context.background)


class ResponseWriter:
    """Buffered HTTP response.

    The status is fixed by the first write_header() or write() call; later
    write_header() calls are ignored. Headers may be changed until the
    server sends the response.
    """

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self._status = 200
        self._wrote_header = False
        self._body = bytearray()

    @property
    def status(self) -> int:
        return self._status

    @property
    def wrote_header(self) -> bool:
        return self._wrote_header

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def text(self) -> str:
        """Return the body decoded as UTF-8."""
        return self._body.decode("utf-8")

    def write_header(self, status: int) -> None:
        if self._wrote_header:
            logger.debug("Ignoring superfluous write_header(%d), status is %d", status, self._status)
            return
        self._status = status
        self._wrote_header = True

    def write(self, data: str | bytes) -> int:
        """Append data to the body, fixing the status at 200 if not yet set."""
        if not self._wrote_header:
            self.write_header(200)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._body.extend(data)
        return len(data)


HttpHandler = Callable[[HttpRequest, ResponseWriter], Awaitable[None]]


def http_error(writer: ResponseWriter, message: str, status: int) -> None:
    """Reply with a plain-text error message and the given status."""
    writer.headers["Content-Type"] = "text/plain; charset=utf-8"
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(status)
    writer.write(message + "\n")


class HttpParseError(LrpcError):
    """Raised when HTTP request parsing fails."""


async def _read_line(reader: asyncio.StreamReader, what: str, timeout: float) -> bytes:
    try:
        return await asyncio.wait_for(reader.readline(), timeout=timeout)
    except TimeoutError:
        raise HttpParseError(f"{what} timeout") from None
    except ValueError as e:
        # StreamReader limit exceeded before a newline was found
        raise HttpParseError(f"{what} too long") from e


async def read_http_request(
    reader: asyncio.StreamReader,
    max_body_size: int = MAX_BODY_SIZE,
    timeout: float = READ_TIMEOUT,
) -> HttpRequest:
    """Read and parse an HTTP request from the stream.

    Args:
        reader: The asyncio StreamReader to read from.
        max_body_size: Largest accepted Content-Length.
        timeout: Seconds allowed for each read.

    Returns:
        Parsed HttpRequest object.

    Raises:
        HttpParseError: If the request is malformed or too large.
    """
    request_line = await _read_line(reader, "Request", timeout)
    if not request_line:
        raise HttpParseError("Empty request")

    if len(request_line) > MAX_REQUEST_LINE_LEN:
        raise HttpParseError(f"Request line too long: {len(request_line)} > {MAX_REQUEST_LINE_LEN}")

    # Parse request line: "POST /rpc HTTP/1.1\r\n"
    try:
        request_line_str = request_line.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise HttpParseError(f"Invalid request encoding: {e}") from e
    parts = request_line_str.split(" ")
    if len(parts) != 3:
        raise HttpParseError(f"Invalid request line: {request_line_str}")
    method, path, _version = parts

    headers: dict[str, str] = {}
    total_headers_size = 0

    while True:
        header_line = await _read_line(reader, "Header read", timeout)
        if not header_line or header_line in (b"\r\n", b"\n"):
            break  # End of headers

        total_headers_size += len(header_line)
        if total_headers_size > MAX_TOTAL_HEADERS_SIZE:
            raise HttpParseError(
                f"Total headers size exceeds limit: {total_headers_size} > {MAX_TOTAL_HEADERS_SIZE}"
            )

        try:
            header_str = header_line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise HttpParseError(f"Invalid header encoding: {e}") from e

        if ":" not in header_str:
            continue  # Skip malformed headers

        name, value = header_str.split(":", 1)
        name = name.strip()
        value = value.strip()

        if len(name) > MAX_HEADER_NAME_LEN:
            raise HttpParseError(f"Header name too long: {len(name)} > {MAX_HEADER_NAME_LEN}")
        if len(value) > MAX_HEADER_VALUE_LEN:
            raise HttpParseError(f"Header value too long: {len(value)} > {MAX_HEADER_VALUE_LEN}")
        if len(headers) >= MAX_HEADERS_COUNT:
            raise HttpParseError(f"Too many headers: exceeds limit of {MAX_HEADERS_COUNT}")

        headers[name.lower()] = value

    body = await _read_body(reader, headers, max_body_size, timeout)
    return HttpRequest(method=method, path=path, headers=headers, body=body)


async def _read_body(
    reader: asyncio.StreamReader,
    headers: dict[str, str],
    max_body_size: int,
    timeout: float,
) -> str:
    content_length_str = headers.get("content-length", "0")
    try:
        content_length = int(content_length_str)
    except ValueError as e:
        raise HttpParseError(f"Invalid Content-Length: {content_length_str}") from e

    if content_length < 0:
        raise HttpParseError(f"Invalid Content-Length: {content_length_str}")
    if content_length > max_body_size:
        raise HttpParseError(f"Request body too large: {content_length} > {max_body_size}")
    if content_length == 0:
        return ""

    try:
        body_bytes = await asyncio.wait_for(reader.readexactly(content_length), timeout=timeout)
        return body_bytes.decode("utf-8")
    except TimeoutError:
        raise HttpParseError("Body read timeout") from None
    except asyncio.IncompleteReadError as e:
        raise HttpParseError(
            f"Incomplete body: expected {content_length}, got {len(e.partial)}"
        ) from e
    except UnicodeDecodeError as e:
        raise HttpParseError(f"Invalid body encoding: {e}") from e


async def send_http_response(
    writer: asyncio.StreamWriter,
    status: int,
    body: bytes,
    headers: dict[str, str] | None = None,
) -> None:
    """Send an HTTP response and close the exchange.

    Args:
        writer: The asyncio StreamWriter to write to.
        status: HTTP status code (e.g., 200, 400, 500).
        body: Response body bytes.
        headers: Extra headers. Content-Length and Connection are always set here.
    """
    status_message = STATUS_MESSAGES.get(status, "Unknown")
    lines = [f"HTTP/1.1 {status} {status_message}"]
    for name, value in (headers or {}).items():
        if name.lower() in ("content-length", "connection"):
            continue
        lines.append(f"{name}: {value}")
    lines.append(f"Content-Length: {len(body)}")
    lines.append("Connection: close")
    lines.extend(["", ""])

    writer.write("\r\n".join(lines).encode("utf-8") + body)
    await writer.drain()


async def _cancel_on_disconnect(reader: asyncio.StreamReader, token: CancellationToken) -> None:
    """Cancel token once the client closes its side of the connection."""
    try:
        while await reader.read(4096):
            pass  # Pipelined data is ignored, one request per connection
    except OSError as e:
        logger.debug("Connection error while waiting for disconnect: %s", e)
    if not token.is_cancelled:
        logger.debug("Client disconnected, cancelling request context")
    token.cancel()


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    handler: HttpHandler,
    max_body_size: int = MAX_BODY_SIZE,
    read_timeout: float = READ_TIMEOUT,
) -> None:
    """Handle a single HTTP connection.

    Reads one request, runs the handler against a buffered ResponseWriter,
    sends the buffered response and closes the connection. The request's
    context is cancelled as soon as the client closes its side of the
    connection, and in any case when this function returns.

    Args:
        reader: The asyncio StreamReader for the connection.
        writer: The asyncio StreamWriter for the connection.
        handler: HTTP handler to run for the request.
        max_body_size: Largest accepted request body.
        read_timeout: Seconds allowed for each read.
    """
    request: HttpRequest | None = None
    watcher: asyncio.Task[None] | None = None
    try:
        try:
            request = await read_http_request(reader, max_body_size, read_timeout)
        except HttpParseError as e:
            logger.debug("Rejecting unparseable HTTP request: %s", e)
            response = ResponseWriter()
            http_error(response, str(e), 400)
            await send_http_response(writer, response.status, response.body, response.headers)
            return

        watcher = asyncio.create_task(_cancel_on_disconnect(reader, request.context.token))
        response = ResponseWriter()
        try:
            await handler(request, response)
        except Exception as e:
            logger.error(
                "Unhandled error serving %s %s: %s", request.method, request.path, e, exc_info=True
            )
            response = ResponseWriter()
            http_error(response, "Internal Server Error", 500)

        await send_http_response(writer, response.status, response.body, response.headers)

    except (ConnectionResetError, BrokenPipeError) as e:
        logger.debug("Client went away: %s", e)
    except Exception as e:
        logger.error("Unexpected error handling connection: %s", e, exc_info=True)
    finally:
        if watcher is not None:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
        if request is not None:
            request.context.token.cancel()
        try:
            writer.close()
            await writer.wait_closed()
        except Exception as close_err:
            logger.debug("Connection close failed (already closed?): %s", close_err)


async def start_http_server(
    handler: HttpHandler,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    max_body_size: int = MAX_BODY_SIZE,
    read_timeout: float = READ_TIMEOUT,
    max_connections: int = 32,
) -> asyncio.Server:
    """Start listening and return the asyncio.Server.

    Pass port=0 to bind an ephemeral port; read it back from
    server.sockets[0].getsockname()[1].

    Args:
        handler: HTTP handler to run for each request.
        host: Address to bind to.
        port: Port to bind to.
        max_body_size: Largest accepted request body.
        read_timeout: Seconds allowed for each read.
        max_connections: Connections handled concurrently; others wait.
    """
    semaphore = asyncio.Semaphore(max_connections)

    async def client_handler(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        async with semaphore:
            await handle_connection(reader, writer, handler, max_body_size, read_timeout)

    server = await asyncio.start_server(client_handler, host, port)
    addr = server.sockets[0].getsockname()
    logger.info("HTTP server running at http://%s:%s/", addr[0], addr[1])
    return server


async def run_http_server(
    handler: HttpHandler,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    max_body_size: int = MAX_BODY_SIZE,
    read_timeout: float = READ_TIMEOUT,
    max_connections: int = 32,
    shutdown_event: asyncio.Event | None = None,
) -> None:
    """Serve handler until shutdown_event is set (or forever if None)."""
    server = await start_http_server(
        handler,
        host=host,
        port=port,
        max_body_size=max_body_size,
        read_timeout=read_timeout,
        max_connections=max_connections,
    )
    async with server:
        if shutdown_event is None:
            await server.serve_forever()
        else:
            await shutdown_event.wait()
    logger.info("HTTP server stopped")
