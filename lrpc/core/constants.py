"""Core constants and paths for lrpc."""

from pathlib import Path

LRPC_DIR_NAME = ".lrpc"
CONFIG_FILE_NAME = "config.json"


def get_lrpc_dir() -> Path:
    """Get ~/.lrpc (global config directory)."""
    return Path.home() / LRPC_DIR_NAME
