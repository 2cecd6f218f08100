"""Configuration loading and validation."""

from lrpc.config.loader import load_config
from lrpc.config.schema import ClientConfig, Config, ServerConfig

__all__ = [
    "ClientConfig",
    "Config",
    "ServerConfig",
    "load_config",
]
