"""
Associative-container oracles.

Keyed mutation is checked for its prior-value semantics (what the call
returns) and its state-after-call consistency (the resulting entries equal
the snapshot with the expected entry put or removed). For the
compute/merge family the remapping function is wrapped in a recorder so
the oracle can check whether, and with what, it was invoked.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import (
    contains_equal,
    count_equal,
    elements_equal,
    map_equal,
    map_hash,
    sequence_equal,
)
from conformance_oracles.oracles.base import check, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import (
    Recorder,
    read_only_defects,
    rejected_atomically,
    require_unchanged,
    tolerated_refusal,
)
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.mapping")


def _entries(m: Any) -> tuple[tuple[Any, Any], ...]:
    return Snapshot.capture(m).entries


def _expect_entries(m: Any, expected: Iterable[tuple[Any, Any]], what: str) -> None:
    expected = tuple(expected)
    after = _entries(m)
    check(map_equal(after, expected), "%s left %r, expected %r", what, after, expected)


def _keyed(
    m: Any,
    what: str,
    call: Callable[[], Any],
    *,
    element: Any = ...,
    defects: set[ErrorKind] | None = None,
) -> tuple[Snapshot, Outcome] | None:
    """Snapshot, perform, and settle the rejection paths; None means the oracle is done."""
    snap = Snapshot.capture(m)
    outcome = Outcome.capture(call)
    defects = (defects or set()) | read_only_defects(m)
    if defects:
        rejected_atomically(outcome, defects, snap, m, what, element)
        return None
    if tolerated_refusal(outcome, snap, m, what, element):
        return None
    return snap, outcome


# -- queries ------------------------------------------------------------------------------


@oracle("mapping", Capability.ASSOCIATIVE)
def check_contains_key(m: Any, key: Any) -> None:
    """contains_key() agrees with a scan of the keys."""
    expected = contains_equal(iter(m), key)
    result = m.contains_key(key)
    check(result == expected, "contains_key(%r) is %s", key, result)


@oracle("mapping", Capability.ASSOCIATIVE)
def check_key_uniqueness(m: Any) -> None:
    """No key is iterated twice, and size() counts the keys."""
    keys = list(m)
    for k in keys:
        check(count_equal(keys, k) == 1, "key %r iterated more than once", k)
    check(len(keys) == m.size(), "%d keys iterated, size() is %d", len(keys), m.size())


@oracle("mapping", Capability.ASSOCIATIVE)
def check_contains_value(m: Any, value: Any) -> None:
    """contains_value() agrees with a scan of the values."""
    expected = contains_equal((v for _, v in _entries(m)), value)
    result = m.contains_value(value)
    check(result == expected, "contains_value(%r) is %s", value, result)


@oracle("mapping", Capability.ASSOCIATIVE)
def check_map_get(m: Any, key: Any) -> None:
    """get(k) is the mapped value, None when k is absent."""
    present, value = Snapshot.capture(m).lookup(key)
    result = m.get(key)
    check(elements_equal(result, value if present else None), "get(%r) is %r", key, result)


@oracle("mapping", Capability.ASSOCIATIVE)
def check_get_or_default(m: Any, key: Any, default: Any) -> None:
    """get_or_default(k, d) is the mapped value (even None) when k is present, else d."""
    present, value = Snapshot.capture(m).lookup(key)
    result = m.get_or_default(key, default)
    expected = value if present else default
    check(elements_equal(result, expected), "get_or_default(%r) is %r, expected %r", key, result, expected)


# -- mutation -----------------------------------------------------------------------------


@oracle("mapping", Capability.ASSOCIATIVE)
def check_put(m: Any, key: Any, value: Any) -> None:
    """put(k, v) returns the displaced value; afterwards get(k) == v and contains_key(k)."""
    done = _keyed(m, "put()", lambda: m.put(key, value), element=None if key is None or value is None else key)
    if done is None:
        return
    snap, outcome = done
    present, previous = snap.lookup(key)
    check(elements_equal(outcome.value, previous if present else None), "put() returned %r", outcome.value)
    check(elements_equal(m.get(key), value), "get(%r) is %r after put()", key, m.get(key))
    check(m.contains_key(key), "contains_key(%r) is False after put()", key)
    check(m.size() == snap.size + (0 if present else 1), "size() is %d after put()", m.size())
    _expect_entries(m, snap.after_put(key, value), "put()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_map_remove(m: Any, key: Any) -> None:
    """remove(k) returns the removed value and drops exactly that entry."""
    done = _keyed(m, "remove()", lambda: m.remove(key), element=key)
    if done is None:
        return
    snap, outcome = done
    present, previous = snap.lookup(key)
    check(elements_equal(outcome.value, previous if present else None), "remove() returned %r", outcome.value)
    check(not m.contains_key(key), "contains_key(%r) is True after remove()", key)
    _expect_entries(m, snap.after_remove_key(key), "remove()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_put_all(m: Any, source: Any) -> None:
    """put_all(src) is put() of every entry of src."""
    defects = {ErrorKind.NULL_NOT_PERMITTED} if source is None else set()
    pairs = [] if source is None else _pairs(source)
    done = _keyed(m, "put_all()", lambda: m.put_all(source), defects=defects,
                  element=None if any(k is None or v is None for k, v in pairs) else ...)
    if done is None:
        return
    snap, _ = done
    expected = snap
    for k, v in pairs:
        expected = Snapshot(expected.shape, *_split(expected.after_put(k, v)))
    _expect_entries(m, expected.entries, "put_all()")


def _pairs(source: Any) -> list[tuple[Any, Any]]:
    if Capability.ASSOCIATIVE in capabilities_of(source):
        return list(Snapshot.capture(source).entries)
    items = getattr(source, "items", None)
    if callable(items):
        return list(items())
    return [tuple(e) for e in source]


def _split(entries: tuple[tuple[Any, Any], ...]) -> tuple[tuple[Any, ...], tuple[Any, ...]]:
    return tuple(k for k, _ in entries), tuple(v for _, v in entries)


@oracle("mapping", Capability.ASSOCIATIVE)
def check_put_if_absent(m: Any, key: Any, value: Any) -> None:
    """put_if_absent(k, v) maps k only when it is absent or mapped to None; returns the prior value."""
    done = _keyed(m, "put_if_absent()", lambda: m.put_if_absent(key, value),
                  element=None if key is None or value is None else key)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    if present and current is not None:
        check(elements_equal(outcome.value, current), "put_if_absent() returned %r", outcome.value)
        require_unchanged(snap, m, "put_if_absent() of a present key")
        return
    check(outcome.value is None, "put_if_absent() of an absent key returned %r", outcome.value)
    _expect_entries(m, snap.after_put(key, value), "put_if_absent()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_remove_entry(m: Any, key: Any, value: Any) -> None:
    """remove_entry(k, v) removes k only while it maps to v."""
    done = _keyed(m, "remove_entry()", lambda: m.remove_entry(key, value), element=key)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    matched = present and elements_equal(current, value)
    check(outcome.value == matched, "remove_entry() returned %r", outcome.value)
    _expect_entries(m, snap.after_remove_key(key) if matched else snap.entries, "remove_entry()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_replace_entry(m: Any, key: Any, old_value: Any, new_value: Any) -> None:
    """replace_entry(k, old, new) remaps k only while it maps to old."""
    done = _keyed(m, "replace_entry()", lambda: m.replace_entry(key, old_value, new_value),
                  element=None if key is None or new_value is None else key)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    matched = present and elements_equal(current, old_value)
    check(outcome.value == matched, "replace_entry() returned %r", outcome.value)
    _expect_entries(m, snap.after_put(key, new_value) if matched else snap.entries, "replace_entry()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_replace(m: Any, key: Any, value: Any) -> None:
    """replace(k, v) remaps a present key and returns the prior value; absent keys stay absent."""
    done = _keyed(m, "replace()", lambda: m.replace(key, value),
                  element=None if key is None or value is None else key)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    check(elements_equal(outcome.value, current if present else None), "replace() returned %r", outcome.value)
    _expect_entries(m, snap.after_put(key, value) if present else snap.entries, "replace()")


# -- compute / merge family ----------------------------------------------------------------


@oracle("mapping", Capability.ASSOCIATIVE)
def check_compute_if_absent(m: Any, key: Any, function: Callable[[Any], Any]) -> None:
    """
    compute_if_absent(k, f): when k maps to a non-None value, f is not
    invoked and that value is returned; otherwise f(k) is invoked once and
    its result stored (None stores nothing) and returned.
    """
    recorder = Recorder(function) if function is not None else None
    defects = {ErrorKind.NULL_NOT_PERMITTED} if function is None else set()
    done = _keyed(m, "compute_if_absent()", lambda: m.compute_if_absent(key, recorder),
                  element=key, defects=defects)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    if present and current is not None:
        check(not recorder.invoked, "function invoked for present key %r", key)
        check(elements_equal(outcome.value, current), "compute_if_absent() returned %r", outcome.value)
        require_unchanged(snap, m, "compute_if_absent() of a present key")
        return
    check(recorder.calls == [(key,)], "function calls were %r, expected one with (%r,)", recorder.calls, key)
    produced = recorder.results[0]
    check(elements_equal(outcome.value, produced), "compute_if_absent() returned %r", outcome.value)
    _expect_entries(m, snap.entries if produced is None else snap.after_put(key, produced), "compute_if_absent()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_compute_if_present(m: Any, key: Any, function: Callable[[Any, Any], Any]) -> None:
    """compute_if_present(k, f) remaps only a non-None mapping; a None result removes the entry."""
    recorder = Recorder(function) if function is not None else None
    defects = {ErrorKind.NULL_NOT_PERMITTED} if function is None else set()
    done = _keyed(m, "compute_if_present()", lambda: m.compute_if_present(key, recorder),
                  element=key, defects=defects)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    if not present or current is None:
        check(not recorder.invoked, "function invoked for absent key %r", key)
        check(outcome.value is None, "compute_if_present() returned %r", outcome.value)
        require_unchanged(snap, m, "compute_if_present() of an absent key")
        return
    check(len(recorder.calls) == 1, "function invoked %d times", len(recorder.calls))
    check(sequence_equal(recorder.calls[0], (key, current)), "function called with %r", recorder.calls[0])
    produced = recorder.results[0]
    check(elements_equal(outcome.value, produced), "compute_if_present() returned %r", outcome.value)
    expected = snap.after_remove_key(key) if produced is None else snap.after_put(key, produced)
    _expect_entries(m, expected, "compute_if_present()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_compute(m: Any, key: Any, function: Callable[[Any, Any], Any]) -> None:
    """compute(k, f) invokes f(k, current-or-None) once; None removes, anything else is stored."""
    recorder = Recorder(function) if function is not None else None
    defects = {ErrorKind.NULL_NOT_PERMITTED} if function is None else set()
    done = _keyed(m, "compute()", lambda: m.compute(key, recorder), element=key, defects=defects)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    check(len(recorder.calls) == 1, "function invoked %d times", len(recorder.calls))
    check(
        sequence_equal(recorder.calls[0], (key, current if present else None)),
        "function called with %r",
        recorder.calls[0],
    )
    produced = recorder.results[0]
    check(elements_equal(outcome.value, produced), "compute() returned %r", outcome.value)
    expected = snap.after_remove_key(key) if produced is None else snap.after_put(key, produced)
    _expect_entries(m, expected, "compute()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_merge(m: Any, key: Any, value: Any, function: Callable[[Any, Any], Any]) -> None:
    """
    merge(k, v, f) stores v for an absent (or None-mapped) key without
    invoking f; otherwise stores f(old, v), removing the entry when that is
    None. A None v is rejected with null_not_permitted.
    """
    recorder = Recorder(function) if function is not None else None
    defects = {ErrorKind.NULL_NOT_PERMITTED} if value is None or function is None else set()
    done = _keyed(m, "merge()", lambda: m.merge(key, value, recorder), element=key, defects=defects)
    if done is None:
        return
    snap, outcome = done
    present, current = snap.lookup(key)
    if not present or current is None:
        check(not recorder.invoked, "function invoked for absent key %r", key)
        check(elements_equal(outcome.value, value), "merge() returned %r", outcome.value)
        _expect_entries(m, snap.after_put(key, value), "merge()")
        return
    check(len(recorder.calls) == 1, "function invoked %d times", len(recorder.calls))
    check(sequence_equal(recorder.calls[0], (current, value)), "function called with %r", recorder.calls[0])
    produced = recorder.results[0]
    check(elements_equal(outcome.value, produced), "merge() returned %r", outcome.value)
    expected = snap.after_remove_key(key) if produced is None else snap.after_put(key, produced)
    _expect_entries(m, expected, "merge()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_for_each(m: Any) -> None:
    """for_each(action) visits every entry exactly once and leaves the map unchanged."""
    snap = Snapshot.capture(m)
    recorder = Recorder(lambda k, v: None)
    expect_return(Outcome.capture(m.for_each, recorder))
    check(len(recorder.calls) == snap.size, "%d entries visited of %d", len(recorder.calls), snap.size)
    check(map_equal(recorder.calls, snap.entries), "visited entries %r", recorder.calls)
    require_unchanged(snap, m, "for_each()")


@oracle("mapping", Capability.ASSOCIATIVE)
def check_map_replace_all(m: Any, function: Callable[[Any, Any], Any]) -> None:
    """replace_all(f) replaces every value v of key k with f(k, v)."""
    recorder = Recorder(function) if function is not None else None
    defects = {ErrorKind.NULL_NOT_PERMITTED} if function is None else set()
    done = _keyed(m, "replace_all()", lambda: m.replace_all(recorder), defects=defects)
    if done is None:
        return
    snap, _ = done
    check(map_equal(recorder.calls, snap.entries), "function saw %r, expected each entry once", recorder.calls)
    _expect_entries(m, tuple((k, r) for (k, _), r in zip(recorder.calls, recorder.results)), "replace_all()")


# -- equality and hash ------------------------------------------------------------------------


@oracle("mapping", Capability.ASSOCIATIVE)
def check_map_equals(m: Any, other: Any) -> None:
    """A map equals exactly the maps with the same entry set."""
    mine = _entries(m)
    if Capability.ASSOCIATIVE in capabilities_of(other):
        expected = map_equal(mine, _entries(other))
    elif isinstance(other, dict):
        expected = map_equal(mine, other.items())
    else:
        expected = False
    result = m == other
    check(result == expected, "(map == %r) is %s, expected %s", other, result, expected)


@oracle("mapping", Capability.ASSOCIATIVE, Capability.HASHABLE)
def check_map_hash(m: Any) -> None:
    """hash_code() is the sum over entries of hash(k) ^ hash(v), wrapped to 32 bits."""
    if not callable(getattr(m, "hash_code", None)):
        inapplicable("no hash_code()")
    expected = map_hash(_entries(m))
    actual = m.hash_code()
    check(actual == expected, "hash_code() is %r, expected %r", actual, expected)
