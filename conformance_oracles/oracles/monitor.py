"""
Monitor oracles: ownership, timed waits, notification and cancellation.

Each oracle spawns at most one auxiliary thread. The notify-after-wait
rendezvous is lock acquisition itself: the auxiliary thread can only take
the monitor once the primary thread has released it by entering ``wait``,
so a notify issued while holding the lock cannot be lost. Every wait and
join is bounded by the configured timeouts; running out of time without
the expected signal is a failure, never a hang.

Cancellation uses an explicit CancellationToken passed to ``wait``; the
oracle clears it on every exit path.

Decision: D-011
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from conformance_oracles.cancellation import CancellationToken
from conformance_oracles.config import OracleConfig
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import Auxiliary, resolve_config
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.monitor")


def _owned(mon: Any) -> bool | None:
    """Whether the calling thread holds *mon*, or None when the monitor cannot tell."""
    query = getattr(mon, "_is_owned", None) or getattr(mon, "owned", None)
    if not callable(query):
        return None
    return bool(query())


@oracle("monitor", Capability.MONITOR)
def check_wait_requires_ownership(mon: Any, *, config: OracleConfig | None = None) -> None:
    """wait() by a thread that does not hold the monitor raises monitor_not_owned."""
    if _owned(mon):
        inapplicable("calling thread holds the monitor")
    expect_error(Outcome.capture(mon.wait, 0), ErrorKind.MONITOR_NOT_OWNED)


@oracle("monitor", Capability.MONITOR)
def check_wait_while_other_holds(mon: Any, *, config: OracleConfig | None = None) -> None:
    """wait() raises monitor_not_owned while another thread holds the monitor."""
    cfg = resolve_config(config)
    if _owned(mon):
        inapplicable("calling thread holds the monitor")
    held = threading.Event()
    done = threading.Event()

    def hold() -> None:
        if not mon.acquire(True, cfg.rendezvous_timeout_s):
            return
        try:
            held.set()
            done.wait(cfg.wait_timeout_s)
        finally:
            mon.release()

    aux = Auxiliary(hold, "monitor-holder").start()
    try:
        check(held.wait(cfg.rendezvous_timeout_s), "auxiliary thread could not take the monitor")
        outcome = Outcome.capture(mon.wait, 0)
    finally:
        done.set()
        aux.join(cfg.join_timeout_s)
    aux.finish(cfg)
    expect_error(outcome, ErrorKind.MONITOR_NOT_OWNED)


@oracle("monitor", Capability.MONITOR)
def check_notify_requires_ownership(mon: Any, *, config: OracleConfig | None = None) -> None:
    """notify() and notify_all() without holding the monitor raise monitor_not_owned."""
    if _owned(mon):
        inapplicable("calling thread holds the monitor")
    expect_error(Outcome.capture(mon.notify), ErrorKind.MONITOR_NOT_OWNED)
    expect_error(Outcome.capture(mon.notify_all), ErrorKind.MONITOR_NOT_OWNED)


@oracle("monitor", Capability.MONITOR)
def check_wait_negative_timeout(mon: Any, timeout: float = -1.0, *, config: OracleConfig | None = None) -> None:
    """wait() with a negative timeout raises illegal_argument."""
    cfg = resolve_config(config)
    outcomes: list[Outcome] = []

    # Runs on the auxiliary thread so an implementation that blocks forever cannot hang the caller
    def attempt() -> None:
        mon.acquire()
        try:
            outcomes.append(Outcome.capture(mon.wait, timeout))
        finally:
            mon.release()

    Auxiliary(attempt, "negative-timeout").start().finish(cfg)
    check(outcomes, "wait(%r) produced no outcome", timeout)
    expect_error(outcomes[0], ErrorKind.ILLEGAL_ARGUMENT)


@oracle("monitor", Capability.MONITOR)
def check_timed_wait(mon: Any, timeout: float = 0.1, *, config: OracleConfig | None = None) -> None:
    """An unnotified timed wait returns False after roughly the timeout, holding the monitor."""
    cfg = resolve_config(config)
    mon.acquire()
    try:
        start = time.monotonic()
        outcome = Outcome.capture(mon.wait, timeout)
        elapsed = time.monotonic() - start
        reacquired = _owned(mon)
    finally:
        mon.release()
    notified = expect_return(outcome)
    check(not notified, "unnotified wait(%r) returned %r", timeout, notified)
    check(elapsed >= timeout - cfg.timing_tolerance_s, "wait(%r) returned after %.3fs", timeout, elapsed)
    check(elapsed <= timeout + cfg.timing_slack_s, "wait(%r) took %.3fs", timeout, elapsed)
    check(reacquired is not False, "monitor not held again after the timed wait")


@oracle("monitor", Capability.MONITOR)
def check_wait_notified(mon: Any, *, config: OracleConfig | None = None) -> None:
    """A waiting thread is woken by a notify issued once it is confirmed to be waiting."""
    cfg = resolve_config(config)
    rendezvous: list[bool] = []

    def signal() -> None:
        got = mon.acquire(True, cfg.rendezvous_timeout_s)
        rendezvous.append(bool(got))
        if got:
            try:
                mon.notify()
            finally:
                mon.release()

    aux = Auxiliary(signal, "notifier")
    mon.acquire()
    try:
        aux.start()
        outcome = Outcome.capture(mon.wait, cfg.wait_timeout_s)
    finally:
        mon.release()
        aux.join(cfg.join_timeout_s)
    aux.finish(cfg)
    check(rendezvous == [True], "notifier never took the monitor")
    notified = expect_return(outcome)
    check(notified, "wait() timed out after %.2fs despite a notify", cfg.wait_timeout_s)


@oracle("monitor", Capability.MONITOR)
def check_guarded_wait(mon: Any, *, config: OracleConfig | None = None) -> None:
    """A guarded wait loop survives a wakeup with the condition still false."""
    cfg = resolve_config(config)
    state = {"ready": False, "wakeups": 0}

    def signal() -> None:
        # first notify leaves the guard false, the second one sets it
        for ready in (False, True):
            if not mon.acquire(True, cfg.rendezvous_timeout_s):
                return
            try:
                state["ready"] = ready
                mon.notify_all()
            finally:
                mon.release()

    aux = Auxiliary(signal, "guard-setter")
    deadline = time.monotonic() + cfg.wait_timeout_s
    mon.acquire()
    try:
        aux.start()
        while not state["ready"]:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            expect_return(Outcome.capture(mon.wait, remaining))
            state["wakeups"] += 1
        ready = state["ready"]
    finally:
        mon.release()
        aux.join(cfg.join_timeout_s)
    aux.finish(cfg)
    check(ready, "guard still false after %.2fs", cfg.wait_timeout_s)
    check(state["wakeups"] >= 1, "guarded loop never waited")


@oracle("monitor", Capability.MONITOR, Capability.INTERRUPTIBLE)
def check_wait_cancelled_before(
    mon: Any,
    token: CancellationToken | None = None,
    *,
    config: OracleConfig | None = None,
) -> None:
    """A token armed before wait() makes it raise interrupted_wait and is left cleared."""
    cfg = resolve_config(config)
    token = token or CancellationToken()
    token.cancel()
    try:
        mon.acquire()
        try:
            outcome = Outcome.capture(mon.wait, cfg.wait_timeout_s, token=token)
            reacquired = _owned(mon)
        finally:
            mon.release()
        left_armed = token.cancelled
    finally:
        token.clear()
    expect_error(outcome, ErrorKind.INTERRUPTED_WAIT)
    check(not left_armed, "token still armed after the interrupted wait")
    check(reacquired is not False, "monitor not held again after the interrupted wait")


@oracle("monitor", Capability.MONITOR, Capability.INTERRUPTIBLE)
def check_wait_cancelled_during(
    mon: Any,
    token: CancellationToken | None = None,
    *,
    config: OracleConfig | None = None,
) -> None:
    """A token armed while the thread waits makes wait() raise interrupted_wait and is left cleared."""
    cfg = resolve_config(config)
    token = token or CancellationToken()
    token.clear()
    rendezvous: list[bool] = []

    def cancel() -> None:
        got = mon.acquire(True, cfg.rendezvous_timeout_s)
        rendezvous.append(bool(got))
        if got:
            try:
                token.cancel()
            finally:
                mon.release()

    aux = Auxiliary(cancel, "canceller")
    try:
        mon.acquire()
        try:
            aux.start()
            outcome = Outcome.capture(mon.wait, cfg.wait_timeout_s, token=token)
            reacquired = _owned(mon)
        finally:
            mon.release()
            aux.join(cfg.join_timeout_s)
        aux.finish(cfg)
        left_armed = token.cancelled
    finally:
        token.clear()
    check(rendezvous == [True], "canceller never took the monitor")
    expect_error(outcome, ErrorKind.INTERRUPTED_WAIT)
    check(not left_armed, "token still armed after the interrupted wait")
    check(reacquired is not False, "monitor not held again after the interrupted wait")
