"""
Fail-fast iteration oracles.

Single-threaded sequencing: an iteration is started, the container is
structurally changed through some path other than the iterator, and the
next step of the iteration must raise concurrent_structural_change.
Removal through the iterator itself must keep the iteration valid.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import require_unchanged, size_of
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.failfast")


@oracle("failfast", Capability.ITERABLE)
def check_fail_fast(container: Any, mutation: Callable[[Any], Any], consume: int = 1) -> None:
    """A size-changing mutation mid-iteration makes the next step raise."""
    size = size_of(container)
    it = iter(container)
    for _ in range(consume):
        try:
            next(it)
        except StopIteration:
            inapplicable("fewer than %d elements to consume", consume)

    outcome = Outcome.capture(mutation, container)
    if outcome.raised:
        inapplicable("mutation was refused: %s", outcome.describe())
    if size_of(container) == size:
        inapplicable("mutation did not change the size")

    expect_error(Outcome.capture(next, it), ErrorKind.CONCURRENT_STRUCTURAL_CHANGE)


@oracle("failfast", Capability.ITERABLE)
def check_iterator_remove_safe(container: Any) -> None:
    """Removing through the iterator keeps the iteration valid and shrinks the container by one."""
    snap = Snapshot.capture(container)
    if snap.size == 0:
        inapplicable("empty container")
    it = iter(container)
    remove = getattr(it, "remove", None)
    if not callable(remove):
        inapplicable("iterator has no remove()")
    next(it)
    outcome = Outcome.capture(remove)
    if outcome.raised and outcome.kind is ErrorKind.UNSUPPORTED_MUTATION:
        require_unchanged(snap, container, "rejected iterator remove()")
        return
    expect_return(outcome)
    rest = Outcome.capture(list, it)
    check(not rest.raised, "continuing after iterator remove() %s", rest.describe())
    check(len(rest.value) == snap.size - 1, "iteration yielded %d more elements, expected %d",
          len(rest.value), snap.size - 1)
    check(size_of(container) == snap.size - 1, "size is %d after iterator remove(), expected %d",
          size_of(container), snap.size - 1)
