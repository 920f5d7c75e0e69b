"""
Set oracles. Bulk operations are checked against the formal set algebra
computed from the snapshot: add_all is union, remove_all difference,
retain_all intersection, and the "changed" flag must agree with whether
the formal result differs from the snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import contains_equal, count_equal, set_equal, set_hash
from conformance_oracles.oracles.base import check, inapplicable, oracle
from conformance_oracles.oracles.support import read_only_defects, rejected_atomically, tolerated_refusal
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.sets")


def _members(s: Any) -> tuple[Any, ...]:
    return Snapshot.capture(s).elements


def _union(before: tuple[Any, ...], items: list[Any]) -> list[Any]:
    result = list(before)
    for x in items:
        if not contains_equal(result, x):
            result.append(x)
    return result


@oracle("sets", Capability.SET_LIKE)
def check_set_add(s: Any, element: Any) -> None:
    """add(e): absent e grows the size by one and reports True; present e changes nothing and reports False."""
    snap = Snapshot.capture(s)
    outcome = Outcome.capture(s.add, element)
    defects = read_only_defects(s)
    if defects:
        rejected_atomically(outcome, defects, snap, s, "add()", element)
        return
    if tolerated_refusal(outcome, snap, s, "add()", element):
        return
    present = snap.contains(element)
    after = _members(s)
    if present:
        check(outcome.value is False, "add() of a present element returned %r", outcome.value)
        check(set_equal(after, snap.elements), "add() of a present element changed the set")
    else:
        check(outcome.value is True, "add() of an absent element returned %r", outcome.value)
        check(len(after) == snap.size + 1, "size went from %d to %d", snap.size, len(after))
        check(s.contains(element), "contains(%r) is False after add()", element)
        check(set_equal(after, _union(snap.elements, [element])), "add() disturbed other members")


@oracle("sets", Capability.SET_LIKE)
def check_set_remove(s: Any, item: Any) -> None:
    """remove(o) removes a present member and reports whether it did."""
    snap = Snapshot.capture(s)
    outcome = Outcome.capture(s.remove, item)
    defects = read_only_defects(s)
    if defects:
        rejected_atomically(outcome, defects, snap, s, "remove()", item)
        return
    if tolerated_refusal(outcome, snap, s, "remove()", item):
        return
    present = snap.contains(item)
    check(outcome.value == present, "remove(%r) returned %r", item, outcome.value)
    after = _members(s)
    expected = snap.after_filter(lambda e: not contains_equal([item], e))
    check(set_equal(after, expected), "remove(%r) left %r", item, after)
    check(not s.contains(item), "contains(%r) is True after remove()", item)


def _bulk(s: Any, method: str, items: Iterable[Any] | None, formal: Any) -> None:
    snap = Snapshot.capture(s)
    defects = read_only_defects(s)
    elements: list[Any] = []
    if items is None:
        defects.add(ErrorKind.NULL_NOT_PERMITTED)
    else:
        elements = list(items)
    outcome = Outcome.capture(getattr(s, method), None if items is None else elements)
    what = f"{method}()"
    probe = None if any(e is None for e in elements) else (elements[0] if elements else ...)
    if defects:
        rejected_atomically(outcome, defects, snap, s, what, probe)
        return
    if tolerated_refusal(outcome, snap, s, what, probe):
        return
    expected = formal(snap, elements)
    after = _members(s)
    check(set_equal(after, expected), "%s left %r, expected %r", what, after, expected)
    changed = not set_equal(expected, snap.elements)
    check(outcome.value == changed, "%s returned %r but the set %s", what, outcome.value,
          "changed" if changed else "did not change")


@oracle("sets", Capability.SET_LIKE)
def check_set_add_all(s: Any, items: Iterable[Any] | None) -> None:
    """add_all(c) leaves the union."""
    _bulk(s, "add_all", items, lambda snap, xs: _union(snap.elements, xs))


@oracle("sets", Capability.SET_LIKE)
def check_set_remove_all(s: Any, items: Iterable[Any] | None) -> None:
    """remove_all(c) leaves the difference."""
    _bulk(s, "remove_all", items, lambda snap, xs: snap.after_filter(lambda e: not contains_equal(xs, e)))


@oracle("sets", Capability.SET_LIKE)
def check_set_retain_all(s: Any, items: Iterable[Any] | None) -> None:
    """retain_all(c) leaves the intersection."""
    _bulk(s, "retain_all", items, lambda snap, xs: snap.after_filter(lambda e: contains_equal(xs, e)))


@oracle("sets", Capability.SET_LIKE, Capability.ITERABLE)
def check_distinct_iteration(s: Any) -> None:
    """Iteration yields every member exactly once."""
    members = list(s)
    for e in members:
        check(count_equal(members, e) == 1, "iteration yields %r more than once", e)
    check(len(members) == s.size(), "iteration yields %d members, size() is %d", len(members), s.size())


@oracle("sets", Capability.SET_LIKE)
def check_set_equals(s: Any, other: Any) -> None:
    """A set equals exactly the sets with the same members, regardless of order."""
    mine = _members(s)
    if isinstance(other, (set, frozenset)):
        expected = set_equal(mine, other)
    elif Capability.SET_LIKE in capabilities_of(other):
        expected = set_equal(mine, _members(other))
    else:
        expected = False
    result = s == other
    check(result == expected, "(set == %r) is %s, expected %s", other, result, expected)


@oracle("sets", Capability.SET_LIKE, Capability.HASHABLE)
def check_set_hash(s: Any) -> None:
    """hash_code() is the sum of the member hashes, wrapped to 32 bits."""
    if not callable(getattr(s, "hash_code", None)):
        inapplicable("no hash_code()")
    expected = set_hash(_members(s))
    actual = s.hash_code()
    check(actual == expected, "hash_code() is %r, expected %r", actual, expected)
