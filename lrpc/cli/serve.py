"""HTTP server mode for lrpc.

Serves an RPC handler over HTTP with the JSON-RPC 2.0 codec.

Example:
    lrpc serve myproject.rpc:mux --port 9000

    curl -X POST http://127.0.0.1:9000/ \\
        -d '{"jsonrpc":"2.0","method":"Echo","params":{"foo":"bar"},"id":"1"}'
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

from lrpc.cli.bootstrap import configure_logging
from lrpc.cli.output import print_error, print_info
from lrpc.config.loader import load_config
from lrpc.core.errors import LrpcError
from lrpc.http.bridge import http_handler
from lrpc.http.json2.codec import Codec
from lrpc.http.server import run_http_server
from lrpc.rpc.handler import Handler, HandlerFunc

logger = logging.getLogger(__name__)

DEFAULT_APP = "lrpc.cli.demo:mux"


class AppLoadError(LrpcError):
    """Raised when the application to serve can't be imported."""


def load_app(spec: str) -> Handler:
    """Import the handler named by a "module:attribute" string.

    A plain callable is wrapped in a HandlerFunc.

    Raises:
        AppLoadError: If the string is malformed, the import fails, or the
            attribute is neither a Handler nor callable.
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise AppLoadError(f"Expected 'module:attribute', got: {spec!r}")

    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as e:
        raise AppLoadError(f"Cannot import module {module_name!r}: {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise AppLoadError(f"{module_name!r} has no attribute {attr_path!r}") from e

    if isinstance(obj, Handler):
        return obj
    if callable(obj):
        return HandlerFunc(obj)
    raise AppLoadError(f"{spec!r} is not a handler: {type(obj).__name__}")


async def run_serve(
    app: str = DEFAULT_APP,
    host: str | None = None,
    port: int | None = None,
    config_path: Path | None = None,
    verbose: bool = False,
    log_dir: Path | None = None,
) -> int:
    """Serve app over HTTP until cancelled.

    Args:
        app: "module:attribute" naming the handler to serve.
        host: Address to bind. If None, uses config.server.host.
        port: Port to listen on. If None, uses config.server.port.
        config_path: Explicit config file instead of the layered lookup.
        verbose: Log at DEBUG instead of the configured level.
        log_dir: Also write logs to {log_dir}/server.log.

    Returns:
        Process exit code.
    """
    try:
        config = load_config(config_path)
    except LrpcError as e:
        print_error(f"Configuration error: {e.message}")
        return 1

    server_config = config.server
    level = logging.DEBUG if verbose else getattr(logging, server_config.log_level)
    configure_logging(level, log_dir)

    try:
        handler = load_app(app)
    except AppLoadError as e:
        print_error(e.message)
        return 1

    effective_host = host if host is not None else server_config.host
    effective_port = port if port is not None else server_config.port

    print_info(f"Serving {app} at http://{effective_host}:{effective_port}/ (Ctrl+C to stop)")
    try:
        await run_http_server(
            http_handler(Codec(), handler),
            host=effective_host,
            port=effective_port,
            max_body_size=server_config.max_body_size,
            read_timeout=server_config.read_timeout,
            max_connections=server_config.max_connections,
        )
    except OSError as e:
        print_error(f"Cannot listen on {effective_host}:{effective_port}: {e}")
        return 1
    return 0
