"""Caller-supplied deadlines and cancellation for units of work."""

import threading
import time

from shared.errors import OperationCancelled


class Deadline:
    """An optional expiry plus a cancel flag, checked between storage steps.

    A unit of work that observes an expired or cancelled deadline raises
    `OperationCancelled` from inside the transaction, which rolls it back.
    """

    def __init__(self, timeout: float | None = None):
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before expiry, or None when there is no expiry."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self) -> None:
        if self.cancelled:
            raise OperationCancelled("Operation was cancelled by the caller")
        if self.expired:
            raise OperationCancelled("Operation deadline exceeded")
