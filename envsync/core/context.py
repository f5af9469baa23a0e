"""Cancellation and deadline context threaded through a load."""

from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import LoadCancelledError, LoadTimeoutError


class Context:
    """Carries an optional deadline and a cancellation flag.

    Providers doing blocking I/O should use ``remaining()`` as their own
    timeout and call ``raise_if_done()`` between requests.
    """

    def __init__(self, deadline: Optional[float] = None):
        # deadline is a time.monotonic() value
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "Context":
        return cls()

    @classmethod
    def with_timeout(cls, seconds: Optional[float]) -> "Context":
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_done(self) -> None:
        if self.cancelled:
            raise LoadCancelledError("operation cancelled")
        if self.expired():
            raise LoadTimeoutError("operation deadline exceeded")
