"""
Iteration and ordering oracles, including the bidirectional list iterator.

Strict-order checks apply only to containers that document an order
(sequences, or sets and maps that declare ``ordered``); every other
container still has to pass the multiset check: iteration yields each
element as often as it is held, no more and no less.
"""

from __future__ import annotations

import logging
from typing import Any

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import elements_equal, multiset_equal, sequence_equal
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import is_mutable, rejected_atomically, size_of
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.ordering")


def _array_elements(container: Any) -> list[Any]:
    array = container.to_array()
    return list(array)


@oracle("ordering", Capability.SEQUENCE, Capability.ITERABLE)
def check_iteration_matches_indexing(seq: Any) -> None:
    """Iteration yields get(0), get(1), ... get(size - 1), nothing more."""
    iterated = list(seq)
    indexed = [seq.get(i) for i in range(seq.size())]
    check(len(iterated) == len(indexed), "iteration yields %d elements, size() is %d", len(iterated), len(indexed))
    check(sequence_equal(iterated, indexed), "iteration %r differs from indexed access %r", iterated, indexed)


@oracle("ordering", Capability.ORDERED, Capability.ITERABLE, Capability.ARRAY)
def check_iteration_order(container: Any) -> None:
    """An ordered container iterates in the order to_array() materializes."""
    iterated = list(container)
    materialized = _array_elements(container)
    if Capability.ASSOCIATIVE in capabilities_of(container):
        materialized = [k for k, _ in materialized]
    check(sequence_equal(iterated, materialized), "iteration %r, to_array() %r", iterated, materialized)


@oracle("ordering", Capability.ITERABLE)
def check_iteration_multiset(container: Any) -> None:
    """Iteration neither duplicates nor omits elements."""
    caps = capabilities_of(container)
    iterated = list(container)
    if Capability.SIZED in caps:
        size = container.size()
        check(len(iterated) == size, "iteration yields %d elements, size() is %d", len(iterated), size)
    if Capability.ARRAY in caps:
        materialized = _array_elements(container)
        if Capability.ASSOCIATIVE in caps:
            materialized = [k for k, _ in materialized]
        check(multiset_equal(iterated, materialized), "iteration %r, to_array() %r", iterated, materialized)
    if Capability.MEMBERSHIP in caps:
        probe = container.contains_key if Capability.ASSOCIATIVE in caps else container.contains
        for e in iterated:
            check(probe(e), "iterated element %r is not a member", e)


@oracle("ordering", Capability.ITERABLE)
def check_iteration_repeatable(container: Any) -> None:
    """Two iterations over an unmodified container agree (in order, when ordered)."""
    first, second = list(container), list(container)
    if Capability.ORDERED in capabilities_of(container):
        check(sequence_equal(first, second), "iterations differ: %r vs %r", first, second)
    else:
        check(multiset_equal(first, second), "iterations differ: %r vs %r", first, second)


@oracle("ordering", Capability.ITERABLE)
def check_exhausted_iterator(container: Any) -> None:
    """An exhausted iterator keeps raising StopIteration."""
    it = iter(container)
    for _ in it:
        pass
    for attempt in range(2):
        outcome = Outcome.capture(next, it)
        check(
            outcome.raised and isinstance(outcome.error, StopIteration),
            "next() #%d on an exhausted iterator %s",
            attempt + 1,
            outcome.describe(),
        )
    has_next = getattr(it, "has_next", None)
    if callable(has_next):
        check(has_next() is False, "has_next() is True on an exhausted iterator")


# -- list iterator ----------------------------------------------------------------------------


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_start(seq: Any, index: int) -> None:
    """list_iterator(i) starts between positions i - 1 and i; i outside [0, size] is index_out_of_range."""
    snap = Snapshot.capture(seq)
    outcome = Outcome.capture(seq.list_iterator, index)
    if not isinstance(index, int):
        rejected_atomically(outcome, {ErrorKind.ILLEGAL_ARGUMENT}, snap, seq, "list_iterator()")
        return
    if not 0 <= index <= snap.size:
        rejected_atomically(outcome, {ErrorKind.INDEX_OUT_OF_RANGE}, snap, seq, f"list_iterator({index})")
        return
    it = expect_return(outcome)
    check(it.next_index() == index, "next_index() is %r", it.next_index())
    check(it.previous_index() == index - 1, "previous_index() is %r", it.previous_index())
    check(it.has_previous() == (index > 0), "has_previous() is %r", it.has_previous())
    check(it.has_next() == (index < snap.size), "has_next() is %r", it.has_next())
    if index < snap.size:
        value = it.next()
        check(elements_equal(value, snap.elements[index]), "next() is %r", value)


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_bounds(seq: Any) -> None:
    """previous() at the start and next() at the end raise StopIteration."""
    it = seq.list_iterator(0)
    outcome = Outcome.capture(it.previous)
    check(isinstance(outcome.error, StopIteration), "previous() at the start %s", outcome.describe())
    it = seq.list_iterator(seq.size())
    outcome = Outcome.capture(it.next)
    check(isinstance(outcome.error, StopIteration), "next() at the end %s", outcome.describe())


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_traversal(seq: Any) -> None:
    """Walking forward then backward yields the sequence and then its reverse."""
    snap = Snapshot.capture(seq)
    it = seq.list_iterator()
    forward = []
    while it.has_next():
        forward.append(it.next())
    backward = []
    while it.has_previous():
        backward.append(it.previous())
    check(sequence_equal(forward, snap.elements), "forward walk %r", forward)
    check(sequence_equal(backward, tuple(reversed(snap.elements))), "backward walk %r", backward)


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_set(seq: Any, element: Any) -> None:
    """set(e) replaces the element last returned; without one it is illegal."""
    if not is_mutable(seq):
        inapplicable("read-only sequence")
    fresh = seq.list_iterator()
    expect_error(Outcome.capture(fresh.set, element), ErrorKind.ILLEGAL_ARGUMENT)
    snap = Snapshot.capture(seq)
    if snap.size == 0:
        return
    it = seq.list_iterator()
    it.next()
    expect_return(Outcome.capture(it.set, element))
    after = Snapshot.capture(seq).elements
    check(sequence_equal(after, snap.after_set(0, element)), "iterator set() produced %r", after)


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_remove(seq: Any) -> None:
    """remove() deletes the element last returned, once; the cursor steps back."""
    if not is_mutable(seq):
        inapplicable("read-only sequence")
    snap = Snapshot.capture(seq)
    if snap.size == 0:
        inapplicable("empty sequence")
    it = seq.list_iterator()
    it.next()
    outcome = Outcome.capture(it.remove)
    if outcome.raised and outcome.kind is ErrorKind.UNSUPPORTED_MUTATION:
        check(snap.matches(seq), "rejected iterator remove() changed the sequence")
        return
    expect_return(outcome)
    after = Snapshot.capture(seq).elements
    check(sequence_equal(after, snap.after_remove_at(0)), "iterator remove() produced %r", after)
    check(it.next_index() == 0, "next_index() is %r after remove()", it.next_index())
    expect_error(Outcome.capture(it.remove), ErrorKind.ILLEGAL_ARGUMENT)


@oracle("ordering", Capability.LIST_ITERATOR)
def check_list_iterator_add(seq: Any, index: int, element: Any) -> None:
    """add(e) inserts at the cursor; the following next() is unaffected."""
    if not is_mutable(seq):
        inapplicable("read-only sequence")
    snap = Snapshot.capture(seq)
    if not isinstance(index, int) or not 0 <= index <= snap.size:
        inapplicable("index outside [0, size]")
    it = seq.list_iterator(index)
    outcome = Outcome.capture(it.add, element)
    if outcome.raised and outcome.kind is ErrorKind.UNSUPPORTED_MUTATION:
        check(snap.matches(seq), "rejected iterator add() changed the sequence")
        return
    expect_return(outcome)
    after = Snapshot.capture(seq).elements
    check(sequence_equal(after, snap.after_insert(index, element)), "iterator add() produced %r", after)
    check(it.next_index() == index + 1, "next_index() is %r after add()", it.next_index())
    if index < snap.size:
        value = it.next()
        check(elements_equal(value, snap.elements[index]), "next() after add() is %r", value)
    check(size_of(seq) == snap.size + 1, "size() is %d after add()", size_of(seq))
