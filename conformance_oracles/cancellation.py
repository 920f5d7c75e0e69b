"""
Explicit cancellation token for interruptible waits.

Replaces ambient per-thread interrupt state: the token is passed to the
monitor's ``wait`` as an argument, so whoever arms it is also the one
responsible for clearing it.
"""

from __future__ import annotations

import threading


class CancellationToken:
    """A thread-safe cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Arm the token; a wait that observes it raises InterruptedWaitError."""
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def consume(self) -> bool:
        """Test-and-clear: return whether the token was armed and disarm it."""
        if self._event.is_set():
            self._event.clear()
            return True
        return False

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the token is armed or *timeout* elapses."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
