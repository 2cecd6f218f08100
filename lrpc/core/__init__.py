"""Core types: errors, cancellation and request contexts."""

from lrpc.core.cancel import CancellationToken
from lrpc.core.context import Context, ContextKey
from lrpc.core.errors import (
    CodecError,
    ConfigError,
    DecodeError,
    EncodeError,
    LrpcError,
    MethodNotFoundError,
    NotAssignableError,
)

__all__ = [
    "CancellationToken",
    "Context",
    "ContextKey",
    "LrpcError",
    "ConfigError",
    "DecodeError",
    "NotAssignableError",
    "EncodeError",
    "CodecError",
    "MethodNotFoundError",
]
