"""Pydantic models for lrpc configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ServerConfig(BaseModel):
    """Configuration for the HTTP server.

    Example in config.json:
        "server": {
            "host": "0.0.0.0",
            "port": 8765,
            "log_level": "INFO"
        }
    """

    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    """Host address to bind to (use 0.0.0.0 for all interfaces)."""

    port: int = Field(default=8765, ge=0, le=65535)
    """Port number for the HTTP server (0 picks a free port)."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    """Logging level for server operations."""

    max_body_size: int = Field(default=1_048_576, gt=0)
    """Largest accepted request body, in bytes."""

    read_timeout: float = Field(default=30.0, gt=0)
    """Seconds allowed for reading each part of a request."""

    max_connections: int = Field(default=32, ge=1)
    """Connections handled concurrently; further connections wait."""


class ClientConfig(BaseModel):
    """Configuration for `lrpc call`."""

    model_config = ConfigDict(extra="forbid")

    url: str = "http://127.0.0.1:8765/"
    """Endpoint the requests are POSTed to."""

    timeout: float = Field(default=60.0, gt=0)
    """Request timeout in seconds."""


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "server": {"port": 9000, "log_level": "DEBUG"},
            "client": {"url": "http://127.0.0.1:9000/"}
        }
    """

    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = ServerConfig()
    client: ClientConfig = ClientConfig()
