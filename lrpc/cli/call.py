"""`lrpc call`: send one JSON-RPC request and print the result."""

from __future__ import annotations

import json
from pathlib import Path

from lrpc.cli.output import print_error, print_json
from lrpc.client import ClientError, RpcClient
from lrpc.config.loader import load_config
from lrpc.core.errors import LrpcError
from lrpc.http.json2.types import JsonRpcError


async def cmd_call(
    method: str,
    params: str | None = None,
    url: str | None = None,
    timeout: float | None = None,
    config_path: Path | None = None,
) -> int:
    """Call method on a JSON-RPC server and print the result as JSON.

    Args:
        method: Method to call.
        params: JSON text of the params, or None to send none.
        url: Endpoint URL. If None, uses config.client.url.
        timeout: Request timeout. If None, uses config.client.timeout.
        config_path: Explicit config file instead of the layered lookup.

    Returns:
        0 on success, 1 on any error.
    """
    try:
        config = load_config(config_path)
    except LrpcError as e:
        print_error(f"Configuration error: {e.message}")
        return 1

    try:
        decoded_params = json.loads(params) if params is not None else None
    except json.JSONDecodeError as e:
        print_error(f"Params are not valid JSON: {e}")
        return 1

    client_config = config.client
    async with RpcClient(
        url or client_config.url,
        timeout=timeout if timeout is not None else client_config.timeout,
    ) as client:
        try:
            result = await client.call(method, decoded_params)
        except JsonRpcError as e:
            print_error(f"{e.code}: {e.message}")
            if e.data is not None:
                print_json(e.data)
            return 1
        except ClientError as e:
            print_error(e.message)
            return 1

    print_json(result)
    return 0
