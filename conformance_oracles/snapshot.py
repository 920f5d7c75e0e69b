"""
Snapshot and differencing helper.

A Snapshot is an immutable, independently allocated copy of a subject's
observable state, taken before an operation so postcondition oracles can
compare the state afterwards against an expected state built from the
snapshot. Element references are shared (the copy is shallow); the
containers holding them are not.

Observation uses only the most basic reads of each shape: indexed access
for sequences, iteration for sets, key iteration plus ``get`` for maps.

Decision: D-005
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.equivalence import (
    elements_equal,
    map_equal,
    multiset_equal,
    sequence_equal,
    set_equal,
)
from conformance_oracles.types import Capability

LOG = logging.getLogger("conformance_oracles.snapshot")


class Shape(StrEnum):
    """How a subject's state is observed and compared."""

    SEQUENCE = "sequence"
    SET = "set"
    MAP = "map"
    TEXT = "text"
    COLLECTION = "collection"


@dataclass(frozen=True)
class Delta:
    """Difference between a snapshot and a later observation."""

    size_before: int
    size_after: int
    added: tuple[Any, ...] = ()
    removed: tuple[Any, ...] = ()
    first_difference: int | None = None

    @property
    def size_delta(self) -> int:
        return self.size_after - self.size_before

    @property
    def unchanged(self) -> bool:
        return not self.added and not self.removed and self.first_difference is None


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of a subject's observable state."""

    shape: Shape
    elements: tuple[Any, ...]
    values: tuple[Any, ...] | None = None

    @property
    def size(self) -> int:
        return len(self.elements)

    @property
    def entries(self) -> tuple[tuple[Any, Any], ...]:
        """(key, value) pairs; only meaningful for maps."""
        if self.values is None:
            return ()
        return tuple(zip(self.elements, self.values))

    # -- capture / compare ----------------------------------------------------

    @classmethod
    def capture(cls, subject: Any, shape: Shape | None = None) -> "Snapshot":
        """Copy the observable state of *subject*."""
        shape = shape or shape_of(subject)
        if shape is Shape.SEQUENCE:
            n = subject.size()
            return cls(shape, tuple(subject.get(i) for i in range(n)))
        if shape is Shape.MAP:
            keys = tuple(iter(subject))
            return cls(shape, keys, tuple(subject.get(k) for k in keys))
        if shape is Shape.TEXT:
            return cls(shape, tuple(str(subject)))
        return cls(shape, tuple(iter(subject)))

    def observe(self, subject: Any) -> "Snapshot":
        """Capture *subject* using this snapshot's shape."""
        return Snapshot.capture(subject, self.shape)

    def same_state(self, other: "Snapshot") -> bool:
        if self.shape is Shape.SEQUENCE or self.shape is Shape.TEXT:
            return sequence_equal(self.elements, other.elements)
        if self.shape is Shape.MAP:
            return map_equal(self.entries, other.entries)
        if self.shape is Shape.SET:
            return set_equal(self.elements, other.elements)
        return multiset_equal(self.elements, other.elements)

    def matches(self, subject: Any) -> bool:
        """True if *subject* still shows exactly the captured state."""
        return self.same_state(self.observe(subject))

    def diff(self, subject: Any) -> Delta:
        after = self.observe(subject)
        if self.shape is Shape.MAP:
            before_items, after_items = list(self.entries), list(after.entries)
        else:
            before_items, after_items = list(self.elements), list(after.elements)
        added = _multiset_minus(after_items, before_items)
        removed = _multiset_minus(before_items, after_items)
        first = None
        if self.shape in (Shape.SEQUENCE, Shape.TEXT):
            first = _first_difference(self.elements, after.elements)
        return Delta(
            size_before=self.size,
            size_after=after.size,
            added=tuple(added),
            removed=tuple(removed),
            first_difference=first,
        )

    # -- queries ----------------------------------------------------------------

    def contains(self, item: Any) -> bool:
        return any(elements_equal(item, e) for e in self.elements)

    def lookup(self, key: Any) -> tuple[bool, Any]:
        """(present, value) for *key* in a map snapshot."""
        for k, v in self.entries:
            if elements_equal(key, k):
                return True, v
        return False, None

    def index_of(self, item: Any) -> int:
        for i, e in enumerate(self.elements):
            if elements_equal(item, e):
                return i
        return -1

    def last_index_of(self, item: Any) -> int:
        for i in range(self.size - 1, -1, -1):
            if elements_equal(item, self.elements[i]):
                return i
        return -1

    # -- expected states for sequences -------------------------------------------

    def after_insert(self, index: int, element: Any) -> tuple[Any, ...]:
        return self.after_insert_all(index, (element,))

    def after_insert_all(self, index: int, items: Iterable[Any]) -> tuple[Any, ...]:
        return self.elements[:index] + tuple(items) + self.elements[index:]

    def after_append(self, items: Iterable[Any]) -> tuple[Any, ...]:
        return self.elements + tuple(items)

    def after_remove_at(self, index: int) -> tuple[Any, ...]:
        return self.elements[:index] + self.elements[index + 1 :]

    def after_set(self, index: int, element: Any) -> tuple[Any, ...]:
        return self.elements[:index] + (element,) + self.elements[index + 1 :]

    def after_remove_first(self, item: Any) -> tuple[Any, ...]:
        index = self.index_of(item)
        if index < 0:
            return self.elements
        return self.after_remove_at(index)

    def after_filter(self, keep: Callable[[Any], bool]) -> tuple[Any, ...]:
        return tuple(e for e in self.elements if keep(e))

    def unchanged_range(
        self, after: Iterable[Any], start: int, stop: int, shift: int = 0
    ) -> bool:
        """True if ``after[i + shift] == before[i]`` for every i in [start, stop)."""
        after = list(after)
        for i in range(start, stop):
            j = i + shift
            if j < 0 or j >= len(after) or not elements_equal(self.elements[i], after[j]):
                return False
        return True

    # -- expected states for maps ---------------------------------------------------

    def after_put(self, key: Any, value: Any) -> tuple[tuple[Any, Any], ...]:
        entries = list(self.entries)
        for i, (k, _) in enumerate(entries):
            if elements_equal(key, k):
                entries[i] = (k, value)
                return tuple(entries)
        entries.append((key, value))
        return tuple(entries)

    def after_remove_key(self, key: Any) -> tuple[tuple[Any, Any], ...]:
        return tuple((k, v) for k, v in self.entries if not elements_equal(key, k))


def shape_of(subject: Any) -> Shape:
    caps = capabilities_of(subject)
    if Capability.SEQUENCE in caps:
        return Shape.SEQUENCE
    if Capability.ASSOCIATIVE in caps:
        return Shape.MAP
    if Capability.SET_LIKE in caps:
        return Shape.SET
    if Capability.TEXT in caps:
        return Shape.TEXT
    return Shape.COLLECTION


def _multiset_minus(items: list[Any], other: list[Any]) -> list[Any]:
    remaining = list(other)
    result = []
    for x in items:
        for i, y in enumerate(remaining):
            if elements_equal(x, y):
                del remaining[i]
                break
        else:
            result.append(x)
    return result


def _first_difference(a: tuple[Any, ...], b: tuple[Any, ...]) -> int | None:
    for i, (x, y) in enumerate(zip(a, b)):
        if not elements_equal(x, y):
            return i
    if len(a) != len(b):
        return min(len(a), len(b))
    return None
