"""Unit tests for the asyncio HTTP transport in lrpc.http.server."""

import asyncio

import pytest

from lrpc.http.server import (
    MAX_HEADERS_COUNT,
    HttpParseError,
    HttpRequest,
    ResponseWriter,
    handle_connection,
    http_error,
    read_http_request,
    send_http_response,
)


class FakeStreamWriter:
    """Collects everything written to it."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


def make_reader(raw: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(raw)
    reader.feed_eof()
    return reader


def post(body: str, path: str = "/") -> bytes:
    encoded = body.encode("utf-8")
    return (
        f"POST {path} HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"Content-Type: application/json\r\n"
        f"Content-Length: {len(encoded)}\r\n"
        f"\r\n"
    ).encode("utf-8") + encoded


def split_response(raw: bytes) -> tuple[str, dict[str, str], bytes]:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return lines[0], headers, body


class TestReadHttpRequest:
    """Tests for read_http_request."""

    @pytest.mark.asyncio
    async def test_parses_request(self):
        request = await read_http_request(make_reader(post('{"a":1}', "/rpc")))

        assert request.method == "POST"
        assert request.path == "/rpc"
        assert request.headers["content-type"] == "application/json"
        assert request.body == '{"a":1}'
        assert not request.context.is_done

    @pytest.mark.asyncio
    async def test_no_body(self):
        request = await read_http_request(make_reader(b"GET /foo HTTP/1.1\r\n\r\n"))
        assert request.method == "GET"
        assert request.body == ""

    @pytest.mark.asyncio
    async def test_empty_request(self):
        with pytest.raises(HttpParseError, match="Empty request"):
            await read_http_request(make_reader(b""))

    @pytest.mark.asyncio
    async def test_invalid_request_line(self):
        with pytest.raises(HttpParseError, match="Invalid request line"):
            await read_http_request(make_reader(b"NONSENSE\r\n\r\n"))

    @pytest.mark.asyncio
    async def test_body_too_large(self):
        with pytest.raises(HttpParseError, match="too large"):
            await read_http_request(make_reader(post("x" * 100)), max_body_size=10)

    @pytest.mark.asyncio
    async def test_invalid_content_length(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: abc\r\n\r\n"
        with pytest.raises(HttpParseError, match="Content-Length"):
            await read_http_request(make_reader(raw))

    @pytest.mark.asyncio
    async def test_incomplete_body(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc"
        with pytest.raises(HttpParseError, match="Incomplete body"):
            await read_http_request(make_reader(raw))

    @pytest.mark.asyncio
    async def test_too_many_headers(self):
        headers = "".join(f"X-H{i}: v\r\n" for i in range(MAX_HEADERS_COUNT + 1))
        raw = f"GET / HTTP/1.1\r\n{headers}\r\n".encode()
        with pytest.raises(HttpParseError, match="Too many headers"):
            await read_http_request(make_reader(raw))


class TestResponseWriter:
    """Tests for the buffered ResponseWriter."""

    def test_defaults(self):
        writer = ResponseWriter()
        assert writer.status == 200
        assert not writer.wrote_header
        assert writer.body == b""

    def test_write_fixes_status(self):
        writer = ResponseWriter()
        writer.write("hello")
        writer.write_header(500)
        assert writer.status == 200
        assert writer.text() == "hello"

    def test_first_write_header_wins(self):
        writer = ResponseWriter()
        writer.write_header(400)
        writer.write_header(500)
        assert writer.status == 400

    def test_write_accepts_bytes_and_str(self):
        writer = ResponseWriter()
        assert writer.write(b"ab") == 2
        assert writer.write("é") == 2
        assert writer.body == "abé".encode()

    def test_http_error(self):
        writer = ResponseWriter()
        http_error(writer, "bad things", 400)
        assert writer.status == 400
        assert writer.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert writer.headers["X-Content-Type-Options"] == "nosniff"
        assert writer.text() == "bad things\n"


class TestSendHttpResponse:
    """Tests for send_http_response."""

    @pytest.mark.asyncio
    async def test_serializes_response(self):
        stream = FakeStreamWriter()
        await send_http_response(stream, 200, b'{"ok":true}', {"Content-Type": "application/json"})

        status_line, headers, body = split_response(bytes(stream.data))
        assert status_line == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "application/json"
        assert headers["content-length"] == "11"
        assert headers["connection"] == "close"
        assert body == b'{"ok":true}'

    @pytest.mark.asyncio
    async def test_overrides_framing_headers(self):
        stream = FakeStreamWriter()
        await send_http_response(stream, 400, b"abc", {"Content-Length": "999"})

        status_line, headers, _ = split_response(bytes(stream.data))
        assert status_line == "HTTP/1.1 400 Bad Request"
        assert headers["content-length"] == "3"


class TestHandleConnection:
    """Tests for handle_connection."""

    @pytest.mark.asyncio
    async def test_runs_handler_and_sends_response(self):
        seen: list[HttpRequest] = []

        async def handler(request: HttpRequest, writer: ResponseWriter) -> None:
            seen.append(request)
            writer.headers["Content-Type"] = "text/plain"
            writer.write(request.path[1:] + ":" + request.body)

        stream = FakeStreamWriter()
        await handle_connection(make_reader(post("bar", "/foo")), stream, handler)

        status_line, headers, body = split_response(bytes(stream.data))
        assert status_line == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "text/plain"
        assert body == b"foo:bar"
        assert stream.closed
        # The request context is cancelled once the connection is done
        assert seen[0].context.is_cancelled

    @pytest.mark.asyncio
    async def test_malformed_http_is_400(self):
        async def handler(request: HttpRequest, writer: ResponseWriter) -> None:
            raise AssertionError("handler must not run")

        stream = FakeStreamWriter()
        await handle_connection(make_reader(b"garbage\r\n\r\n"), stream, handler)

        status_line, headers, body = split_response(bytes(stream.data))
        assert status_line == "HTTP/1.1 400 Bad Request"
        assert headers["content-type"] == "text/plain; charset=utf-8"
        assert body.strip()

    @pytest.mark.asyncio
    async def test_handler_crash_is_500(self):
        async def handler(request: HttpRequest, writer: ResponseWriter) -> None:
            writer.write("partial")
            raise RuntimeError("boom")

        stream = FakeStreamWriter()
        await handle_connection(make_reader(post("{}")), stream, handler)

        status_line, _, body = split_response(bytes(stream.data))
        assert status_line == "HTTP/1.1 500 Internal Server Error"
        assert b"partial" not in body

    @pytest.mark.asyncio
    async def test_client_disconnect_cancels_context(self):
        """Closing the client side cancels the request context mid-handler."""
        started = asyncio.Event()

        async def handler(request: HttpRequest, writer: ResponseWriter) -> None:
            started.set()
            while not request.context.is_cancelled:
                await asyncio.sleep(0.01)
            writer.write("gone")

        reader = asyncio.StreamReader()
        reader.feed_data(post("{}"))
        stream = FakeStreamWriter()
        task = asyncio.create_task(handle_connection(reader, stream, handler))

        await asyncio.wait_for(started.wait(), timeout=1.0)
        await asyncio.sleep(0.05)
        assert not task.done()

        reader.feed_eof()
        await asyncio.wait_for(task, timeout=1.0)

        _, _, body = split_response(bytes(stream.data))
        assert body == b"gone"
