"""
Array materialization oracles.

``to_array()`` returns fresh storage holding exactly the container's
elements. ``to_array(buffer)`` reuses a list buffer that is large enough,
setting the slot immediately past the population to None, and allocates
otherwise. Typed ``array.array`` buffers that cannot hold the elements are
a type mismatch.
"""

from __future__ import annotations

import array
import logging
from typing import Any, Callable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import multiset_equal, sequence_equal
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import require_unchanged
from conformance_oracles.snapshot import Shape, Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.arrays")


class _Marker:
    """Distinct filler object for buffer slots."""

    def __repr__(self) -> str:
        return "<marker>"


def _expected_items(container: Any) -> tuple[list[Any], bool]:
    """Items to_array() must hold and whether their order is prescribed."""
    snap = Snapshot.capture(container)
    if snap.shape is Shape.MAP:
        return list(snap.entries), Capability.ORDERED in capabilities_of(container)
    return list(snap.elements), Capability.ORDERED in capabilities_of(container)


def _same_items(actual: Any, expected: list[Any], ordered: bool) -> bool:
    items = list(actual)
    return sequence_equal(items, expected) if ordered else multiset_equal(items, expected)


@oracle("arrays", Capability.ARRAY)
def check_to_array(container: Any) -> None:
    """to_array() holds exactly the elements, in iteration order when ordered."""
    expected, ordered = _expected_items(container)
    result = container.to_array()
    check(len(result) == len(expected), "to_array() has length %d, size is %d", len(result), len(expected))
    check(_same_items(result, expected, ordered), "to_array() is %r, expected %r", result, expected)


@oracle("arrays", Capability.ARRAY)
def check_to_array_independent(container: Any) -> None:
    """Writing into the returned array does not change the container, nor does a second call see it."""
    snap = Snapshot.capture(container)
    result = container.to_array()
    if len(result) == 0:
        return
    result[0] = _Marker()
    require_unchanged(snap, container, "writing into to_array()")
    again = container.to_array()
    check(again is not result, "to_array() returned the same storage twice")
    check(not isinstance(again[0], _Marker), "to_array() reflects writes into a previous result")


@oracle("arrays", Capability.ARRAY)
def check_to_array_buffer(container: Any, buffer_length: int) -> None:
    """to_array(buffer) reuses a large enough buffer with a None sentinel, else allocates."""
    expected, ordered = _expected_items(container)
    size = len(expected)
    marker = _Marker()
    buffer = [marker] * buffer_length
    result = expect_return(Outcome.capture(container.to_array, buffer))
    if buffer_length >= size:
        check(result is buffer, "a buffer of length %d >= size %d was not reused", buffer_length, size)
        check(len(result) == buffer_length, "buffer length changed to %d", len(result))
        check(_same_items(result[:size], expected, ordered), "buffer holds %r", result[:size])
        if buffer_length > size:
            check(result[size] is None, "slot %d past the population is %r, not None", size, result[size])
        check(all(x is marker for x in result[size + 1 :]), "slots beyond the sentinel were overwritten")
    else:
        check(result is not buffer, "a buffer of length %d < size %d was returned", buffer_length, size)
        check(len(result) == size, "fresh array has length %d, size is %d", len(result), size)
        check(_same_items(result, expected, ordered), "fresh array holds %r", result)
        check(all(x is marker for x in buffer), "a too-small buffer was written to")


def _storable(typecode: str, item: Any) -> bool:
    try:
        array.array(typecode, [item])
    except (TypeError, OverflowError):
        return False
    return True


@oracle("arrays", Capability.ARRAY)
def check_to_array_typed(container: Any, typecode: str) -> None:
    """A typed buffer receives the elements when it can hold them all, else type_mismatch."""
    expected, ordered = _expected_items(container)
    snap = Snapshot.capture(container)
    buffer = array.array(typecode)
    outcome = Outcome.capture(container.to_array, buffer)
    if not all(_storable(typecode, e) for e in expected):
        expect_error(outcome, ErrorKind.TYPE_MISMATCH)
        require_unchanged(snap, container, "to_array() into a typed buffer")
        return
    result = expect_return(outcome)
    check(isinstance(result, array.array) and result.typecode == typecode,
          "to_array() into array('%s') returned %r", typecode, type(result).__name__)
    check(_same_items(result, expected, ordered), "typed array holds %r", list(result))


@oracle("arrays", Capability.ARRAY)
def check_array_round_trip(container: Any, factory: Callable[[Any], Any]) -> None:
    """Materializing to an array and constructing from it reproduces an equal container."""
    if factory is None:
        inapplicable("no constructor accepting an array")
    snap = Snapshot.capture(container)
    rebuilt = factory(container.to_array())
    copy = Snapshot.capture(rebuilt, snap.shape)
    check(snap.same_state(copy), "round trip produced %r from %r", copy.elements, snap.elements)
    check(rebuilt == container, "round-tripped container is not == the original")
