"""
View-reflection oracles.

A view shares storage with its backing container: changes made through
the backing container must show in the view and removals made through the
view must show in the backing container. Additions through a map view are
never supported, and a view of a read-only container must reject every
structural mutation rather than succeed silently.

Sub-range views of sequences additionally support positional writes and
structural changes in both directions.
"""

from __future__ import annotations

import logging
from typing import Any

from conformance_oracles.equivalence import elements_equal, map_equal, sequence_equal
from conformance_oracles.oracles.base import check, expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import is_mutable, read_only_defects, rejected_atomically, require_unchanged
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.views")

_VIEWS = ("key_set", "values", "entry_set")


def _view_items(view: Any) -> list[Any]:
    return list(iter(view))


def _require_mutable_map(m: Any) -> None:
    if not is_mutable(m):
        inapplicable("backing map is read-only")


# -- map views -------------------------------------------------------------------------------


@oracle("views", Capability.ASSOCIATIVE)
def check_views_reflect_put(m: Any, key: Any, value: Any) -> None:
    """Views taken before put(k, v) show the new entry afterwards."""
    _require_mutable_map(m)
    keys, values, entries = m.key_set(), m.values(), m.entry_set()
    expect_return(Outcome.capture(m.put, key, value))
    size = m.size()
    check(keys.contains(key), "key_set() does not contain %r after put()", key)
    check(values.contains(value), "values() does not contain %r after put()", value)
    check(entries.contains((key, value)), "entry_set() does not contain %r after put()", (key, value))
    for name, view in zip(_VIEWS, (keys, values, entries)):
        check(view.size() == size, "%s() size %d, map size %d", name, view.size(), size)
        check(len(_view_items(view)) == size, "%s() iterates %d items", name, len(_view_items(view)))


@oracle("views", Capability.ASSOCIATIVE)
def check_views_reflect_remove(m: Any, key: Any) -> None:
    """Views taken before remove(k) no longer show k afterwards."""
    _require_mutable_map(m)
    present, value = Snapshot.capture(m).lookup(key)
    keys, entries, values = m.key_set(), m.entry_set(), m.values()
    expect_return(Outcome.capture(m.remove, key))
    check(not keys.contains(key), "key_set() still contains %r", key)
    if present:
        check(not entries.contains((key, value)), "entry_set() still contains %r", (key, value))
    check(values.size() == m.size(), "values() size %d, map size %d", values.size(), m.size())


@oracle("views", Capability.ASSOCIATIVE)
def check_key_set_remove_writes_through(m: Any, key: Any) -> None:
    """key_set().remove(k) removes the entry from the map."""
    _require_mutable_map(m)
    snap = Snapshot.capture(m)
    present, _ = snap.lookup(key)
    removed = expect_return(Outcome.capture(m.key_set().remove, key))
    check(removed == present, "key_set().remove(%r) returned %r", key, removed)
    check(not m.contains_key(key), "map still contains %r", key)
    check(map_equal(Snapshot.capture(m).entries, snap.after_remove_key(key)),
          "key_set().remove(%r) disturbed other entries", key)


@oracle("views", Capability.ASSOCIATIVE)
def check_values_remove_writes_through(m: Any, value: Any) -> None:
    """values().remove(v) removes exactly one entry mapped to v."""
    _require_mutable_map(m)
    snap = Snapshot.capture(m)
    occurrences = [k for k, v in snap.entries if elements_equal(v, value)]
    removed = expect_return(Outcome.capture(m.values().remove, value))
    check(removed == bool(occurrences), "values().remove(%r) returned %r", value, removed)
    expected_size = snap.size - (1 if occurrences else 0)
    check(m.size() == expected_size, "map size %d, expected %d", m.size(), expected_size)
    remaining = [k for k, v in Snapshot.capture(m).entries if elements_equal(v, value)]
    check(len(remaining) == max(0, len(occurrences) - 1), "values().remove() removed %d entries",
          len(occurrences) - len(remaining))


@oracle("views", Capability.ASSOCIATIVE)
def check_entry_set_remove_writes_through(m: Any, key: Any) -> None:
    """entry_set().remove((k, v)) removes the entry; a stale value removes nothing."""
    _require_mutable_map(m)
    snap = Snapshot.capture(m)
    present, value = snap.lookup(key)
    removed = expect_return(Outcome.capture(m.entry_set().remove, (key, value)))
    check(removed == present, "entry_set().remove() returned %r", removed)
    check(not m.contains_key(key), "map still contains %r", key)
    check(m.size() == snap.size - (1 if present else 0), "map size %d after entry removal", m.size())


@oracle("views", Capability.ASSOCIATIVE)
def check_view_add_rejected(m: Any, element: Any) -> None:
    """Adding through any map view raises unsupported_mutation and leaves the map intact."""
    snap = Snapshot.capture(m)
    for name in _VIEWS:
        view = getattr(m, name)()
        item = (element, element) if name == "entry_set" else element
        expect_error(Outcome.capture(view.add, item), ErrorKind.UNSUPPORTED_MUTATION)
        require_unchanged(snap, m, f"{name}().add()")


@oracle("views", Capability.ASSOCIATIVE)
def check_read_only_views(m: Any) -> None:
    """Views of a read-only map reject remove, clear and bulk removal."""
    if is_mutable(m):
        inapplicable("backing map is mutable")
    snap = Snapshot.capture(m)
    for name in _VIEWS:
        view = getattr(m, name)()
        items = _view_items(view)
        probe = items[0] if items else None
        for label, call in (
            ("remove", lambda: view.remove(probe)),
            ("clear", view.clear),
            ("remove_all", lambda: view.remove_all(items)),
            ("retain_all", lambda: view.retain_all([])),
        ):
            expect_error(Outcome.capture(call), ErrorKind.UNSUPPORTED_MUTATION)
            require_unchanged(snap, m, f"{name}().{label}()")


# -- sub-range views --------------------------------------------------------------------------


def _range_defects(lo: Any, hi: Any, size: int) -> set[ErrorKind]:
    defects: set[ErrorKind] = set()
    if not isinstance(lo, int) or not isinstance(hi, int):
        return {ErrorKind.ILLEGAL_ARGUMENT}
    if lo > hi:
        defects.add(ErrorKind.ILLEGAL_ARGUMENT)
    if lo < 0 or hi > size:
        defects.add(ErrorKind.INDEX_OUT_OF_RANGE)
    return defects


@oracle("views", Capability.SEQUENCE, Capability.SUB_RANGE)
def check_sub_list_range(seq: Any, lo: int, hi: int) -> None:
    """sub_list(lo, hi) requires 0 <= lo <= hi <= size and has size hi - lo."""
    snap = Snapshot.capture(seq)
    outcome = Outcome.capture(seq.sub_list, lo, hi)
    defects = _range_defects(lo, hi, snap.size)
    if defects:
        rejected_atomically(outcome, defects, snap, seq, f"sub_list({lo}, {hi})")
        return
    view = expect_return(outcome)
    check(view.size() == hi - lo, "sub_list(%d, %d).size() is %d", lo, hi, view.size())
    require_unchanged(snap, seq, "sub_list()")


@oracle("views", Capability.SEQUENCE, Capability.SUB_RANGE)
def check_sub_list_elements(seq: Any, lo: int, hi: int) -> None:
    """Position i of the view is position lo + i of the backing sequence."""
    if _range_defects(lo, hi, seq.size()):
        inapplicable("invalid range")
    view = seq.sub_list(lo, hi)
    for i in range(hi - lo):
        check(elements_equal(view.get(i), seq.get(lo + i)), "view.get(%d) != seq.get(%d)", i, lo + i)
    check(sequence_equal(list(view), [seq.get(i) for i in range(lo, hi)]), "view iteration differs")


@oracle("views", Capability.SEQUENCE, Capability.SUB_RANGE, Capability.MUTABLE)
def check_sub_list_write_through(seq: Any, lo: int, hi: int, element: Any) -> None:
    """Writes through the view show in the backing sequence and vice versa."""
    if _range_defects(lo, hi, seq.size()) or lo == hi:
        inapplicable("needs a non-empty valid range")
    view = seq.sub_list(lo, hi)
    original = seq.get(lo)

    expect_return(Outcome.capture(view.set, 0, element))
    check(elements_equal(seq.get(lo), element), "view.set(0) not visible at seq.get(%d)", lo)

    expect_return(Outcome.capture(seq.set, lo, original))
    check(elements_equal(view.get(0), original), "seq.set(%d) not visible at view.get(0)", lo)

    size = seq.size()
    if read_only_defects(view):
        return
    outcome = Outcome.capture(view.add, element)
    if outcome.raised and outcome.kind is ErrorKind.UNSUPPORTED_MUTATION:
        return  # fixed-size backing sequence
    expect_return(outcome)
    check(seq.size() == size + 1, "view.add() did not grow the backing sequence")
    check(elements_equal(seq.get(hi), element), "view.add() not visible at seq.get(%d)", hi)
    check(view.size() == hi - lo + 1, "view size %d after add()", view.size())


@oracle("views", Capability.SEQUENCE, Capability.SUB_RANGE, Capability.MUTABLE)
def check_sub_list_clear(seq: Any, lo: int, hi: int) -> None:
    """Clearing a sub-range view removes that range from the backing sequence."""
    if _range_defects(lo, hi, seq.size()):
        inapplicable("invalid range")
    snap = Snapshot.capture(seq)
    view = seq.sub_list(lo, hi)
    outcome = Outcome.capture(view.clear)
    if outcome.raised and outcome.kind is ErrorKind.UNSUPPORTED_MUTATION:
        require_unchanged(snap, seq, "rejected sub_list().clear()")
        return
    expect_return(outcome)
    check(view.size() == 0, "view size %d after clear()", view.size())
    after = Snapshot.capture(seq).elements
    expected = snap.elements[:lo] + snap.elements[hi:]
    check(sequence_equal(after, expected), "backing sequence is %r, expected %r", after, expected)
