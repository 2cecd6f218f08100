"""Cancellation support for async operations."""

from __future__ import annotations

import logging
from asyncio import CancelledError
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Token for cooperative cancellation of async operations.

    The transport cancels a request's token when the connection is done with
    it. Handlers should check is_cancelled or call raise_if_cancelled() at
    convenient points; nothing interrupts a handler that ignores the token.

    Example:
        token = CancellationToken()

        async def long_operation():
            for item in items:
                token.raise_if_cancelled()
                await process(item)

        # When the client goes away:
        token.cancel()
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation and notify callbacks."""
        if self._cancelled:
            return  # Already cancelled
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register a callback to be called when cancelled.

        If already cancelled, callback is invoked immediately.
        """
        if self._cancelled:
            self._run_callback(callback)
            return
        self._callbacks.append(callback)

    def child(self) -> CancellationToken:
        """Create a token that is cancelled whenever this one is.

        Cancelling the child leaves this token untouched and unregisters
        the child from it.
        """
        token = CancellationToken()
        self.on_cancel(token.cancel)
        token.on_cancel(lambda: self.remove_callback(token.cancel))
        return token

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Unregister a callback added with on_cancel(), if still registered."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise CancelledError if cancellation was requested.

        Raises:
            asyncio.CancelledError: If cancel() was called.
        """
        if self._cancelled:
            raise CancelledError("Operation cancelled")

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.debug("Cancellation callback failed", exc_info=True)
