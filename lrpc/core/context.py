"""Request-scoped context: cancellation, deadline and typed attachments.

A Context is immutable. Deriving one (with_value, with_cancel, with_timeout)
returns a new instance; the original stays valid and unchanged. Values are
attached under ContextKey instances, which compare by identity, so two
modules can never collide on a key by picking the same name.

Example:
    USER: ContextKey[str] = ContextKey("user")

    ctx = Context.background().with_value(USER, "alice")
    ctx, cancel = ctx.with_cancel()
    assert ctx.value(USER) == "alice"
    cancel()
    assert ctx.is_done
"""

from __future__ import annotations

import time
from asyncio import CancelledError
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar, overload

from lrpc.core.cancel import CancellationToken

T = TypeVar("T")
D = TypeVar("D")


class ContextKey(Generic[T]):
    """Typed key for values attached to a Context."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"ContextKey({self.name!r})"


class Context:
    """Cancellable, attachable context for one RPC invocation."""

    __slots__ = ("_token", "_deadline", "_values")

    def __init__(
        self,
        token: CancellationToken | None = None,
        deadline: float | None = None,
        values: Mapping[ContextKey[Any], Any] | None = None,
    ) -> None:
        self._token = token if token is not None else CancellationToken()
        self._deadline = deadline
        self._values: Mapping[ContextKey[Any], Any] = MappingProxyType(dict(values or {}))

    @classmethod
    def background(cls) -> Context:
        """Return a new root context with no deadline and no values."""
        return cls()

    @property
    def token(self) -> CancellationToken:
        """The cancellation token shared by this context."""
        return self._token

    @property
    def deadline(self) -> float | None:
        """Deadline as a time.monotonic() timestamp, or None."""
        return self._deadline

    @property
    def is_cancelled(self) -> bool:
        return self._token.is_cancelled

    @property
    def is_expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def is_done(self) -> bool:
        """True once the context is cancelled or its deadline has passed."""
        return self.is_cancelled or self.is_expired

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """Raise if the context is finished.

        Raises:
            asyncio.CancelledError: If the context was cancelled.
            TimeoutError: If the deadline has passed.
        """
        if self.is_cancelled:
            raise CancelledError("Context cancelled")
        if self.is_expired:
            raise TimeoutError("Context deadline exceeded")

    @overload
    def value(self, key: ContextKey[T]) -> T | None: ...

    @overload
    def value(self, key: ContextKey[T], default: D) -> T | D: ...

    def value(self, key: ContextKey[Any], default: Any = None) -> Any:
        """Return the value attached under key, or default."""
        return self._values.get(key, default)

    def with_value(self, key: ContextKey[T], value: T) -> Context:
        """Return a derived context with value attached under key."""
        values = dict(self._values)
        values[key] = value
        return Context(self._token, self._deadline, values)

    def with_cancel(self) -> tuple[Context, Callable[[], None]]:
        """Return a derived context and the function that cancels it.

        Cancelling this context cancels the derived one; the reverse does
        not hold.
        """
        token = self._token.child()
        return Context(token, self._deadline, self._values), token.cancel

    def with_timeout(self, seconds: float) -> Context:
        """Return a derived, separately cancellable context with a deadline.

        An earlier deadline inherited from this context is kept.
        """
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return Context(self._token.child(), deadline, self._values)
