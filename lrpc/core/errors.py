"""Typed exception hierarchy for lrpc."""

from __future__ import annotations

from typing import get_origin


class LrpcError(Exception):
    """Base class for all lrpc errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(LrpcError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class DecodeError(LrpcError):
    """Raised when call arguments cannot be converted to the requested type."""


class NotAssignableError(DecodeError):
    """Raised when a direct call's arguments don't fit the requested type."""

    def __init__(self, value: object, target: object) -> None:
        self.value = value
        self.target = target
        super().__init__(
            f"value of type {type(value).__name__} is not assignable to {_type_name(target)}"
        )


class EncodeError(LrpcError):
    """Raised when a result cannot be serialized for the wire."""


class CodecError(LrpcError):
    """Raised when a codec is handed a call it cannot respond to."""


class MethodNotFoundError(LrpcError):
    """Returned (not raised) by a mux when no handler matches the call's method."""


def _type_name(target: object) -> str:
    if isinstance(target, type) and get_origin(target) is None:
        return target.__name__
    return repr(target)
