"""Explicit cancellation signal for blocking admission waits.

Responsibilities:
- Let one thread abandon another thread's pending `AdmissionGate.acquire`.
- Notify registered waiters so they re-check state instead of polling.
"""

from __future__ import annotations

import threading
from typing import Callable


class CancellationToken:
    """One-shot, thread-safe cancellation flag with wake-up callbacks."""

    def __init__(self) -> None:
        """Initialize an uncancelled token."""

        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_handle = 0

    @property
    def cancelled(self) -> bool:
        """Return whether `cancel` has been called."""

        with self._lock:
            return self._cancelled

    def cancel(self) -> None:
        """Mark the token cancelled and run every registered callback once."""

        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> int | None:
        """Register a callback to run on cancellation.

        The callback runs immediately, and `None` is returned, when the token is
        already cancelled. Otherwise a handle for `remove_callback` is returned.
        """

        with self._lock:
            if not self._cancelled:
                handle = self._next_handle
                self._next_handle += 1
                self._callbacks[handle] = callback
                return handle
        callback()
        return None

    def remove_callback(self, handle: int | None) -> None:
        """Unregister a callback; unknown or `None` handles are ignored."""

        if handle is None:
            return
        with self._lock:
            self._callbacks.pop(handle, None)
