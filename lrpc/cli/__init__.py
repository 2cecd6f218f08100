"""Command line interface for lrpc."""

import asyncio

from lrpc.cli.arg_parser import parse_args
from lrpc.cli.call import cmd_call
from lrpc.cli.serve import run_serve


def main(argv: list[str] | None = None) -> int:
    """Entry point for the `lrpc` command."""
    args = parse_args(argv)
    try:
        if args.command == "serve":
            return asyncio.run(run_serve(
                app=args.app,
                host=args.host,
                port=args.port,
                config_path=args.config,
                verbose=args.verbose,
                log_dir=args.log_dir,
            ))
        return asyncio.run(cmd_call(
            args.method,
            args.params,
            url=args.url,
            timeout=args.timeout,
            config_path=args.config,
        ))
    except KeyboardInterrupt:
        return 130
