"""Helpers shared by the oracle families."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.config import OracleConfig, default_config
from conformance_oracles.oracles.base import check, expect_error, fail
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.taxonomy import dominant
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.support")

# Kinds an implementation may raise to refuse a particular element
ELEMENT_REJECTIONS = frozenset(
    {ErrorKind.NULL_NOT_PERMITTED, ErrorKind.TYPE_MISMATCH, ErrorKind.ILLEGAL_ARGUMENT}
)


class Recorder:
    """Wraps a function and records every call and result."""

    def __init__(self, function: Callable[..., Any]) -> None:
        self.function = function
        self.calls: list[tuple[Any, ...]] = []
        self.results: list[Any] = []

    def __call__(self, *args: Any) -> Any:
        self.calls.append(args)
        result = self.function(*args)
        self.results.append(result)
        return result

    @property
    def invoked(self) -> bool:
        return bool(self.calls)


def resolve_config(config: OracleConfig | None) -> OracleConfig:
    return config or default_config()


def is_mutable(subject: Any) -> bool:
    return Capability.MUTABLE in capabilities_of(subject)


def size_of(subject: Any) -> int:
    size = getattr(subject, "size", None)
    if callable(size):
        return size()
    return len(subject)


def require_unchanged(snap: Snapshot, subject: Any, what: str) -> None:
    if not snap.matches(subject):
        fail("%s changed the state: %s", what, snap.diff(subject))


def rejected_atomically(
    outcome: Outcome,
    defects: set[ErrorKind],
    snap: Snapshot,
    subject: Any,
    what: str,
    element: Any = ...,
) -> None:
    """
    An operation with known defects must raise the dominant one and change nothing.

    The subject may also hold an element restriction the caller cannot see;
    a rejection of *element* that outranks the known defects is accepted.
    """
    expected = dominant(defects)
    if outcome.raised and element is not ... and outcome.kind in ELEMENT_REJECTIONS:
        kind = outcome.kind
        if kind.priority < expected.priority and (kind is not ErrorKind.NULL_NOT_PERMITTED or element is None):
            expected = kind
    expect_error(outcome, expected)
    require_unchanged(snap, subject, what)


def tolerated_refusal(
    outcome: Outcome,
    snap: Snapshot,
    subject: Any,
    what: str,
    element: Any = ...,
) -> bool:
    """
    True if *outcome* is an acceptable refusal of an optional operation.

    Mutation is optional and implementations may restrict their elements,
    so an unsupported-mutation raise, or an element rejection consistent
    with *element*, passes as long as the state is unchanged. Any other
    raise fails. Returns False for a normal return.
    """
    if not outcome.raised:
        return False
    allowed = {ErrorKind.UNSUPPORTED_MUTATION}
    if element is not ...:
        allowed |= ELEMENT_REJECTIONS
        if element is not None:
            allowed.discard(ErrorKind.NULL_NOT_PERMITTED)
    check(outcome.kind in allowed, "%s: unexpected error: %s", what, outcome.describe())
    require_unchanged(snap, subject, what)
    return True


def read_only_defects(subject: Any) -> set[ErrorKind]:
    """Defects every mutation of *subject* carries before its arguments are considered."""
    return set() if is_mutable(subject) else {ErrorKind.UNSUPPORTED_MUTATION}


class Auxiliary:
    """
    The single helper thread a concurrency oracle may spawn.

    Errors raised by *target* are recorded rather than lost, and
    ``finish`` turns a thread that outlives its join bound, or one that
    raised, into an oracle failure.
    """

    def __init__(self, target: Callable[[], Any], name: str) -> None:
        self.errors: list[Exception] = []
        self._target = target
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self) -> None:
        try:
            self._target()
        except Exception as exc:
            LOG.debug("%s raised %s: %s", self._thread.name, type(exc).__name__, exc)
            self.errors.append(exc)

    def start(self) -> "Auxiliary":
        self._thread.start()
        return self

    def join(self, timeout: float) -> bool:
        """Join with a bound; True if the thread has finished or never started."""
        if self._thread.ident is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def finish(self, config: OracleConfig) -> None:
        check(self.join(config.join_timeout_s), "%s did not finish within %.2fs",
              self._thread.name, config.join_timeout_s)
        if self.errors:
            fail("%s raised %s: %s", self._thread.name, type(self.errors[0]).__name__, self.errors[0])
