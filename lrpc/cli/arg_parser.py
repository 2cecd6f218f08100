"""Argument parsing for the lrpc CLI."""

import argparse
from pathlib import Path

from lrpc.cli.serve import DEFAULT_APP


def add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config argument to a parser."""
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.lrpc/config.json merged with ./.lrpc/config.json)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="lrpc",
        description="Serve and call RPC handlers over HTTP with JSON-RPC 2.0",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # lrpc serve [APP]
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a handler over HTTP",
        description="Serve a Handler over HTTP using the JSON-RPC 2.0 codec.",
    )
    serve_parser.add_argument(
        "app",
        nargs="?",
        default=DEFAULT_APP,
        help=f"Handler to serve as 'module:attribute' (default: {DEFAULT_APP})",
    )
    serve_parser.add_argument("--host", help="Address to bind (default: from config)")
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        help="Port to listen on (default: from config, 8765)",
    )
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    serve_parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write logs to LOG_DIR/server.log",
    )
    add_config_arg(serve_parser)

    # lrpc call METHOD [PARAMS]
    call_parser = subparsers.add_parser(
        "call",
        help="Call a method on a JSON-RPC server",
        description="Send one JSON-RPC 2.0 request and print the result as JSON.",
    )
    call_parser.add_argument("method", help="Method to call")
    call_parser.add_argument(
        "params",
        nargs="?",
        default=None,
        help='Params as JSON text, e.g. \'{"foo": "bar"}\'',
    )
    call_parser.add_argument("--url", help="Endpoint URL (default: from config)")
    call_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: from config, 60)",
    )
    add_config_arg(call_parser)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
