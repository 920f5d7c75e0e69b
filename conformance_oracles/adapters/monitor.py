"""
Reference monitor: a reentrant lock with one condition queue.

Unlike ``threading.Condition`` it tracks its owner explicitly, so every
ownership violation is reported as MonitorNotOwnedError, a negative
timeout is an IllegalArgumentError, and ``wait`` honours an explicit
CancellationToken before and during the wait.
"""

from __future__ import annotations

import logging
import threading
import time

from conformance_oracles.cancellation import CancellationToken
from conformance_oracles.errors import (
    IllegalArgumentError,
    InterruptedWaitError,
    MonitorNotOwnedError,
)

LOG = logging.getLogger("conformance_oracles.adapters.monitor")


class Monitor:
    """Lock plus condition queue with the ``threading.Condition`` API."""

    def __init__(self, poll_interval_s: float = 0.01) -> None:
        self._lock = threading.RLock()
        self._cond = threading.Condition(self._lock)
        self._poll_interval_s = poll_interval_s
        # only read or written while holding _lock
        self._owner: int | None = None
        self._depth = 0

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        if not self._lock.acquire(blocking, timeout):
            return False
        self._owner = threading.get_ident()
        self._depth += 1
        return True

    def release(self) -> None:
        self._require_owner("release")
        self._depth -= 1
        if self._depth == 0:
            self._owner = None
        self._lock.release()

    def __enter__(self) -> "Monitor":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def owned(self) -> bool:
        """True if the calling thread holds the monitor."""
        return self._owner == threading.get_ident()

    _is_owned = owned

    def _require_owner(self, operation: str) -> None:
        if not self.owned():
            raise MonitorNotOwnedError(f"{operation}() by a thread that does not own the monitor")

    def wait(
        self,
        timeout: float | None = None,
        token: CancellationToken | None = None,
    ) -> bool:
        """
        Release the monitor and block until notified, timed out or cancelled.

        Returns True if notified and False on timeout. A token armed before
        the call or during the wait raises InterruptedWaitError; the token is
        consumed (cleared) when that happens. The monitor is held again on
        every exit path.
        """
        self._require_owner("wait")
        if timeout is not None and timeout < 0:
            raise IllegalArgumentError(f"timeout must be non-negative, got {timeout}")
        if token is not None and token.consume():
            raise InterruptedWaitError("cancelled before wait")

        deadline = None if timeout is None else time.monotonic() + timeout
        owner, depth = self._owner, self._depth
        self._owner, self._depth = None, 0
        try:
            while True:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                if token is None:
                    return self._cond.wait(remaining)
                step = self._poll_interval_s if remaining is None else min(remaining, self._poll_interval_s)
                if self._cond.wait(step):
                    return True
                if token.consume():
                    raise InterruptedWaitError("cancelled during wait")
        finally:
            self._owner, self._depth = owner, depth

    def notify(self, n: int = 1) -> None:
        self._require_owner("notify")
        self._cond.notify(n)

    def notify_all(self) -> None:
        self._require_owner("notify_all")
        self._cond.notify_all()

    def __repr__(self) -> str:
        return f"Monitor(owner={self._owner}, depth={self._depth})"
