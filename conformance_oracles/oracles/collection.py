"""
Size, emptiness and membership oracles for any collection.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import contains_equal
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import is_mutable, require_unchanged, tolerated_refusal
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.collection")

_NOTHING = object()

# A membership probe may be refused for an element the collection can never hold
_PROBE_REFUSALS = {ErrorKind.NULL_NOT_PERMITTED, ErrorKind.TYPE_MISMATCH}


@oracle("collection", Capability.SIZED)
def check_size_non_negative(collection: Any) -> None:
    """size() is a non-negative int."""
    size = collection.size()
    check(isinstance(size, int) and not isinstance(size, bool), "size() returned %r", size)
    check(size >= 0, "size() returned %d", size)


@oracle("collection", Capability.SIZED)
def check_is_empty(collection: Any, probe: Any = _NOTHING) -> None:
    """is_empty() agrees with size() == 0 and with an independent membership probe."""
    size = collection.size()
    empty = collection.is_empty()
    check(empty == (size == 0), "is_empty() is %s but size() is %d", empty, size)

    caps = capabilities_of(collection)
    if Capability.ITERABLE in caps:
        first = next(iter(collection), _NOTHING)
        check(
            (first is _NOTHING) == empty,
            "is_empty() is %s but iteration %s",
            empty,
            "yields nothing" if first is _NOTHING else f"yields {first!r}",
        )
        if first is not _NOTHING and Capability.MEMBERSHIP in caps:
            probe_member = collection.contains_key if Capability.ASSOCIATIVE in caps else collection.contains
            check(probe_member(first), "contains() is False for iterated element %r", first)

    if empty and Capability.MEMBERSHIP in caps and Capability.ASSOCIATIVE not in caps:
        target = object() if probe is _NOTHING else probe
        outcome = Outcome.capture(collection.contains, target)
        if outcome.raised:
            check(outcome.kind in _PROBE_REFUSALS, "contains() on empty: %s", outcome.describe())
        else:
            check(outcome.value is False, "empty collection contains %r", target)


@oracle("collection", Capability.SIZED, Capability.ITERABLE)
def check_size_matches_iteration(collection: Any) -> None:
    """size() equals the number of elements iteration yields."""
    size = collection.size()
    count = sum(1 for _ in collection)
    check(size == count, "size() is %d but iteration yields %d elements", size, count)


@oracle("collection", Capability.MEMBERSHIP, Capability.ITERABLE)
def check_contains(collection: Any, item: Any) -> None:
    """contains() agrees with a linear scan, in both directions."""
    expected = contains_equal(iter(collection), item)
    caps = capabilities_of(collection)
    probe = collection.contains_key if Capability.ASSOCIATIVE in caps else collection.contains
    outcome = Outcome.capture(probe, item)
    if outcome.raised:
        check(
            not expected and outcome.kind in _PROBE_REFUSALS,
            "contains(%r) %s",
            item,
            outcome.describe(),
        )
        return
    check(
        outcome.value == expected,
        "contains(%r) is %s but a scan finds it %s",
        item,
        outcome.value,
        "present" if expected else "absent",
    )


@oracle("collection", Capability.MEMBERSHIP, Capability.ITERABLE)
def check_contains_all(collection: Any, items: Iterable[Any]) -> None:
    """contains_all() is the conjunction of per-element membership."""
    if not callable(getattr(collection, "contains_all", None)):
        inapplicable("no contains_all()")
    if items is None:
        expect_error(Outcome.capture(collection.contains_all, None), ErrorKind.NULL_NOT_PERMITTED)
        return
    items = list(items)
    elements = list(collection)
    expected = all(contains_equal(elements, x) for x in items)
    result = expect_return(Outcome.capture(collection.contains_all, items))
    check(result == expected, "contains_all(%r) is %s, expected %s", items, result, expected)


@oracle("collection", Capability.SIZED, Capability.ITERABLE)
def check_clear(collection: Any) -> None:
    """clear() empties a mutable collection; a read-only one refuses and stays intact."""
    if not callable(getattr(collection, "clear", None)):
        inapplicable("no clear()")
    snap = Snapshot.capture(collection)
    outcome = Outcome.capture(collection.clear)
    if not is_mutable(collection):
        expect_error(outcome, ErrorKind.UNSUPPORTED_MUTATION)
        require_unchanged(snap, collection, "rejected clear()")
        return
    if tolerated_refusal(outcome, snap, collection, "clear()"):
        return
    check(collection.size() == 0, "size() is %d after clear()", collection.size())
    check(collection.is_empty(), "is_empty() is False after clear()")
    check(next(iter(collection), _NOTHING) is _NOTHING, "iteration yields elements after clear()")
