"""
Indexed-sequence oracles: positional access and mutation, bulk operations,
sorting, and the sequence equality/hash contract.

Positional mutation follows one pattern: snapshot, perform, then check the
return value, the size delta, and that every position the operation does
not address is unchanged (shifted where the operation shifts). A call with
a known defect (index out of range, read-only subject) must raise the
dominant defect and leave the sequence exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import (
    contains_equal,
    elements_equal,
    multiset_equal,
    sequence_equal,
    sequence_hash,
)
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import (
    Recorder,
    read_only_defects,
    rejected_atomically,
    require_unchanged,
    tolerated_refusal,
)
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.taxonomy import classify, dominant
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.sequence")


def _in_range(index: Any, limit: int) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < limit


def _elements(seq: Any) -> tuple[Any, ...]:
    return Snapshot.capture(seq).elements


def _representative(elements: list[Any]) -> Any:
    """The element a refusal of a bulk argument is attributed to (None first)."""
    if any(e is None for e in elements):
        return None
    return elements[0] if elements else ...


# -- positional access -------------------------------------------------------------------


@oracle("sequence", Capability.SEQUENCE)
def check_get(seq: Any, index: int) -> None:
    """get(i) returns the i-th element; an out-of-range index raises index_out_of_range."""
    snap = Snapshot.capture(seq)
    outcome = Outcome.capture(seq.get, index)
    if not _in_range(index, snap.size):
        rejected_atomically(outcome, {ErrorKind.INDEX_OUT_OF_RANGE}, snap, seq, f"get({index})")
        return
    value = expect_return(outcome)
    check(elements_equal(value, snap.elements[index]), "get(%d) is %r", index, value)
    require_unchanged(snap, seq, "get()")


@oracle("sequence", Capability.SEQUENCE)
def check_set(seq: Any, index: int, element: Any) -> None:
    """set(i, e) returns the displaced element and replaces only position i."""
    snap = Snapshot.capture(seq)
    defects = read_only_defects(seq)
    if not _in_range(index, snap.size):
        defects.add(ErrorKind.INDEX_OUT_OF_RANGE)
    outcome = Outcome.capture(seq.set, index, element)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, f"set({index})", element)
        return
    if tolerated_refusal(outcome, snap, seq, "set()", element):
        return
    check(elements_equal(outcome.value, snap.elements[index]), "set() returned %r", outcome.value)
    after = _elements(seq)
    check(sequence_equal(after, snap.after_set(index, element)), "set(%d) produced %r", index, after)


@oracle("sequence", Capability.SEQUENCE)
def check_add(seq: Any, element: Any) -> None:
    """add(e) appends e, returns True and grows the size by one."""
    snap = Snapshot.capture(seq)
    outcome = Outcome.capture(seq.add, element)
    defects = read_only_defects(seq)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, "add()", element)
        return
    if tolerated_refusal(outcome, snap, seq, "add()", element):
        return
    check(outcome.value is True, "add() returned %r", outcome.value)
    after = _elements(seq)
    check(len(after) == snap.size + 1, "size went from %d to %d", snap.size, len(after))
    check(sequence_equal(after, snap.after_append((element,))), "add() produced %r", after)


@oracle("sequence", Capability.SEQUENCE)
def check_insert(seq: Any, index: int, element: Any) -> None:
    """insert(i, e) places e at i and shifts the tail right by one."""
    snap = Snapshot.capture(seq)
    defects = read_only_defects(seq)
    if not _in_range(index, snap.size + 1):
        defects.add(ErrorKind.INDEX_OUT_OF_RANGE)
    outcome = Outcome.capture(seq.insert, index, element)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, f"insert({index})", element)
        return
    if tolerated_refusal(outcome, snap, seq, "insert()", element):
        return
    after = _elements(seq)
    check(len(after) == snap.size + 1, "size went from %d to %d", snap.size, len(after))
    check(elements_equal(after[index], element), "get(%d) is %r after insert", index, after[index])
    check(snap.unchanged_range(after, 0, index), "insert(%d) disturbed the prefix", index)
    check(
        snap.unchanged_range(after, index, snap.size, shift=1),
        "insert(%d) did not shift the tail by one",
        index,
    )


@oracle("sequence", Capability.SEQUENCE)
def check_remove_at(seq: Any, index: int) -> None:
    """remove_at(i) returns the removed element and shifts the tail left by one."""
    snap = Snapshot.capture(seq)
    defects = read_only_defects(seq)
    if not _in_range(index, snap.size):
        defects.add(ErrorKind.INDEX_OUT_OF_RANGE)
    outcome = Outcome.capture(seq.remove_at, index)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, f"remove_at({index})")
        return
    if tolerated_refusal(outcome, snap, seq, "remove_at()"):
        return
    check(elements_equal(outcome.value, snap.elements[index]), "remove_at() returned %r", outcome.value)
    after = _elements(seq)
    check(len(after) == snap.size - 1, "size went from %d to %d", snap.size, len(after))
    check(snap.unchanged_range(after, 0, index), "remove_at(%d) disturbed the prefix", index)
    check(
        snap.unchanged_range(after, index + 1, snap.size, shift=-1),
        "remove_at(%d) did not shift the tail by one",
        index,
    )


@oracle("sequence", Capability.SEQUENCE)
def check_remove(seq: Any, item: Any) -> None:
    """remove(o) removes the first occurrence only and reports whether it did."""
    snap = Snapshot.capture(seq)
    outcome = Outcome.capture(seq.remove, item)
    defects = read_only_defects(seq)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, "remove()", item)
        return
    if tolerated_refusal(outcome, snap, seq, "remove()", item):
        return
    present = snap.index_of(item) >= 0
    check(outcome.value == present, "remove(%r) returned %r", item, outcome.value)
    after = _elements(seq)
    check(sequence_equal(after, snap.after_remove_first(item)), "remove(%r) produced %r", item, after)


@oracle("sequence", Capability.SEQUENCE)
def check_index_of(seq: Any, item: Any) -> None:
    """index_of() finds the first occurrence, -1 when absent."""
    snap = Snapshot.capture(seq)
    result = seq.index_of(item)
    check(result == snap.index_of(item), "index_of(%r) is %r", item, result)
    require_unchanged(snap, seq, "index_of()")


@oracle("sequence", Capability.SEQUENCE)
def check_last_index_of(seq: Any, item: Any) -> None:
    """last_index_of() finds the last occurrence, -1 when absent."""
    snap = Snapshot.capture(seq)
    result = seq.last_index_of(item)
    check(result == snap.last_index_of(item), "last_index_of(%r) is %r", item, result)
    require_unchanged(snap, seq, "last_index_of()")


# -- bulk operations ---------------------------------------------------------------------


def _bulk(
    seq: Any,
    method: str,
    args: tuple[Any, ...],
    items: Iterable[Any] | None,
    expected: Callable[[Snapshot, list[Any]], tuple[Any, ...]],
    defects: set[ErrorKind] | None = None,
) -> None:
    snap = Snapshot.capture(seq)
    defects = (defects or set()) | read_only_defects(seq)
    if items is None:
        defects.add(ErrorKind.NULL_NOT_PERMITTED)
        elements: list[Any] = []
    else:
        elements = list(items)
    outcome = Outcome.capture(getattr(seq, method), *args, None if items is None else elements)
    what = f"{method}()"
    probe = _representative(elements)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, what, probe)
        return
    if tolerated_refusal(outcome, snap, seq, what, probe):
        return
    want = expected(snap, elements)
    after = _elements(seq)
    check(sequence_equal(after, want), "%s produced %r, expected %r", what, after, want)
    changed = not sequence_equal(want, snap.elements)
    check(outcome.value == changed, "%s returned %r but the sequence %s", what, outcome.value,
          "changed" if changed else "did not change")


@oracle("sequence", Capability.SEQUENCE)
def check_add_all(seq: Any, items: Iterable[Any] | None) -> None:
    """add_all(c) appends c in iteration order; returns whether anything was added."""
    _bulk(seq, "add_all", (), items, lambda snap, xs: snap.after_append(xs))


@oracle("sequence", Capability.SEQUENCE)
def check_add_all_at(seq: Any, index: int, items: Iterable[Any] | None) -> None:
    """add_all_at(i, c) inserts c at i and shifts the tail right by len(c)."""
    defects = set()
    if not _in_range(index, seq.size() + 1):
        defects.add(ErrorKind.INDEX_OUT_OF_RANGE)
    _bulk(seq, "add_all_at", (index,), items, lambda snap, xs: snap.after_insert_all(index, xs), defects)


@oracle("sequence", Capability.SEQUENCE)
def check_remove_all(seq: Any, items: Iterable[Any] | None) -> None:
    """remove_all(c) removes every element contained in c."""
    _bulk(
        seq,
        "remove_all",
        (),
        items,
        lambda snap, xs: snap.after_filter(lambda e: not contains_equal(xs, e)),
    )


@oracle("sequence", Capability.SEQUENCE)
def check_retain_all(seq: Any, items: Iterable[Any] | None) -> None:
    """retain_all(c) keeps exactly the elements contained in c, in order."""
    _bulk(
        seq,
        "retain_all",
        (),
        items,
        lambda snap, xs: snap.after_filter(lambda e: contains_equal(xs, e)),
    )


@oracle("sequence", Capability.SEQUENCE)
def check_replace_all(seq: Any, operator: Callable[[Any], Any]) -> None:
    """replace_all(f) replaces every element e with f(e) in place."""
    snap = Snapshot.capture(seq)
    recorder = Recorder(operator) if operator is not None else None
    defects = read_only_defects(seq)
    if operator is None:
        defects.add(ErrorKind.NULL_NOT_PERMITTED)
    outcome = Outcome.capture(seq.replace_all, recorder)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, "replace_all()")
        return
    if tolerated_refusal(outcome, snap, seq, "replace_all()"):
        return
    visited = tuple(args[0] for args in recorder.calls)
    check(sequence_equal(visited, snap.elements), "operator saw %r, expected %r", visited, snap.elements)
    want = tuple(recorder.results)
    after = _elements(seq)
    check(sequence_equal(after, want), "replace_all() produced %r, expected %r", after, want)


@oracle("sequence", Capability.SEQUENCE)
def check_sort(seq: Any, key: Callable[[Any], Any] | None = None) -> None:
    """
    sort() orders the sequence stably; incomparable elements raise the same
    kind the reference sort raises and lose no elements.
    """
    snap = Snapshot.capture(seq)
    reference = Outcome.capture(sorted, snap.elements, key=key)
    outcome = Outcome.capture(seq.sort, key)
    defects = read_only_defects(seq) if snap.size > 1 else set()
    if reference.raised:
        defects.add(classify(reference.error) or ErrorKind.TYPE_MISMATCH)
        expect_error(outcome, dominant(defects))
        after = _elements(seq)
        check(multiset_equal(after, snap.elements), "failed sort() lost or duplicated elements")
        return
    if defects:
        rejected_atomically(outcome, defects, snap, seq, "sort()")
        return
    if tolerated_refusal(outcome, snap, seq, "sort()"):
        return
    after = _elements(seq)
    check(sequence_equal(after, reference.value), "sort() produced %r, expected %r", after, reference.value)
    if key is not None:
        # equal keys keep their relative order
        check(all(a is b for a, b in zip(after, reference.value)), "sort() is not stable")


# -- equality and hash -------------------------------------------------------------------


@oracle("sequence", Capability.SEQUENCE)
def check_sequence_equals(seq: Any, other: Any) -> None:
    """A sequence equals exactly the sequences with pairwise-equal elements in order."""
    mine = _elements(seq)
    if isinstance(other, (list, tuple)):
        expected = sequence_equal(mine, other)
    elif Capability.SEQUENCE in capabilities_of(other):
        expected = sequence_equal(mine, _elements(other))
    else:
        expected = False
    result = seq == other
    check(result == expected, "(seq == %r) is %s, expected %s", other, result, expected)


@oracle("sequence", Capability.SEQUENCE, Capability.HASHABLE)
def check_sequence_hash(seq: Any) -> None:
    """hash_code() follows h = 31*h + hash(e) from 1, wrapped to 32 bits."""
    if not callable(getattr(seq, "hash_code", None)):
        inapplicable("no hash_code()")
    expected = sequence_hash(_elements(seq))
    actual = seq.hash_code()
    check(actual == expected, "hash_code() is %r, expected %r", actual, expected)
