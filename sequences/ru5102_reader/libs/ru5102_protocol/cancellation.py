"""
Cancellation tokens for blocking reads.

A token may be cancelled explicitly from another thread, carry a deadline,
or both. Transports poll it between short reads.
"""

import threading
import time
from typing import Optional

from .exceptions import CancelledError, TimeoutError


class CancellationToken:
    """Cooperative cancellation signal with optional deadline."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize token.

        Args:
            timeout: Seconds until the token expires (None for no deadline)
        """
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._event = threading.Event()

    @classmethod
    def none(cls) -> 'CancellationToken':
        """Token that never fires unless cancelled."""
        return cls()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None if no deadline)."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """
        Raise if the token has fired.

        Raises:
            CancelledError: If cancel() was called
            TimeoutError: If the deadline has passed
        """
        if self._event.is_set():
            raise CancelledError("Operation cancelled")
        if self.expired:
            raise TimeoutError(self.timeout)

    def __repr__(self) -> str:
        if self.cancelled:
            state = "cancelled"
        elif self.expired:
            state = "expired"
        else:
            state = "active"
        return f"CancellationToken(timeout={self.timeout}, {state})"
