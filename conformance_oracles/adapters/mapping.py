"""
Associative adapter over a Python dict, with live key/value/entry views.

The views share storage with the map: removals through a view write
through, additions through a view are rejected, and a structural change to
the map invalidates in-progress view iterators.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Mapping

from conformance_oracles.adapters.base import (
    AbstractCollection,
    ElementPolicy,
    FailFastIterator,
    materialize,
    require_argument,
)
from conformance_oracles.equivalence import elements_equal, map_equal, map_hash, set_equal, set_hash
from conformance_oracles.errors import UnsupportedMutationError
from conformance_oracles.types import Capability

LOG = logging.getLogger("conformance_oracles.adapters.mapping")


def entries_of(source: Any) -> list[tuple[Any, Any]]:
    """(key, value) pairs of a MapAdapter, a Mapping, or an iterable of pairs."""
    require_argument(source, "a map argument")
    if isinstance(source, MapAdapter):
        return list(source.entry_set())
    if isinstance(source, Mapping):
        return list(source.items())
    return [tuple(e) for e in source]


class MapAdapter:
    """Reference map. Keys must be hashable; iteration yields keys."""

    def __init__(
        self,
        entries: Any = None,
        *,
        ordered: bool = False,
        policy: ElementPolicy | None = None,
        **restrictions: Any,
    ) -> None:
        self.policy = policy or ElementPolicy(**restrictions)
        self.ordered = ordered
        self._data: dict[Any, Any] = {}
        self._mod_count = 0
        for k, v in entries_of(entries) if entries is not None else ():
            self.policy.check_element(k)
            self.policy.check_element(v)
            self._data[k] = v

    @property
    def read_only(self) -> bool:
        return self.policy.read_only

    # -- internal ---------------------------------------------------------------------

    def _has(self, key: Any) -> bool:
        try:
            return key in self._data
        except TypeError:
            return False

    def _remove_key(self, key: Any) -> None:
        self.policy.check_structural("remove")
        del self._data[key]
        self._mod_count += 1

    def _store(self, key: Any, value: Any) -> Any:
        previous = self._data.get(key)
        if key not in self._data:
            self.policy.check_structural("put")
            self._mod_count += 1
        self._data[key] = value
        return previous

    def _check_entry(self, key: Any, value: Any, operation: str) -> None:
        self.policy.check_element(key)
        self.policy.check_element(value)
        self.policy.check_mutable(operation)

    # -- query -------------------------------------------------------------------------

    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def __iter__(self) -> Iterator[Any]:
        return FailFastIterator(self, self._data)

    def contains_key(self, key: Any) -> bool:
        return self._has(key)

    def contains_value(self, value: Any) -> bool:
        return any(elements_equal(value, v) for v in self._data.values())

    def get(self, key: Any) -> Any:
        return self._data.get(key) if self._has(key) else None

    def get_or_default(self, key: Any, default: Any) -> Any:
        if self._has(key):
            return self._data[key]
        return default

    # -- mutation ------------------------------------------------------------------------

    def put(self, key: Any, value: Any) -> Any:
        self._check_entry(key, value, "put")
        return self._store(key, value)

    def remove(self, key: Any) -> Any:
        self.policy.check_structural("remove")
        if not self._has(key):
            return None
        previous = self._data[key]
        self._remove_key(key)
        return previous

    def put_all(self, source: Any) -> None:
        entries = entries_of(source)
        for k, v in entries:
            self.policy.check_element(k)
            self.policy.check_element(v)
        self.policy.check_mutable("put_all")
        for k, v in entries:
            self._store(k, v)

    def clear(self) -> None:
        self.policy.check_structural("clear")
        if self._data:
            self._data.clear()
            self._mod_count += 1

    def put_if_absent(self, key: Any, value: Any) -> Any:
        self._check_entry(key, value, "put_if_absent")
        current = self.get(key)
        if current is None:
            current = self._store(key, value)
        return current

    def remove_entry(self, key: Any, value: Any) -> bool:
        self.policy.check_structural("remove_entry")
        if self._has(key) and elements_equal(self._data[key], value):
            self._remove_key(key)
            return True
        return False

    def replace_entry(self, key: Any, old_value: Any, new_value: Any) -> bool:
        self._check_entry(key, new_value, "replace_entry")
        if self._has(key) and elements_equal(self._data[key], old_value):
            self._data[key] = new_value
            return True
        return False

    def replace(self, key: Any, value: Any) -> Any:
        self._check_entry(key, value, "replace")
        if self._has(key):
            return self._store(key, value)
        return None

    def compute_if_absent(self, key: Any, function: Callable[[Any], Any]) -> Any:
        require_argument(function, "a mapping function")
        self.policy.check_element(key)
        self.policy.check_mutable("compute_if_absent")
        current = self.get(key)
        if current is not None:
            return current
        value = function(key)
        if value is not None:
            self._store(key, value)
        return value

    def compute_if_present(self, key: Any, function: Callable[[Any, Any], Any]) -> Any:
        require_argument(function, "a remapping function")
        self.policy.check_element(key)
        self.policy.check_mutable("compute_if_present")
        current = self.get(key)
        if current is None:
            return None
        value = function(key, current)
        if value is None:
            self._remove_key(key)
            return None
        self._data[key] = value
        return value

    def compute(self, key: Any, function: Callable[[Any, Any], Any]) -> Any:
        require_argument(function, "a remapping function")
        self.policy.check_element(key)
        self.policy.check_mutable("compute")
        current = self.get(key)
        value = function(key, current)
        if value is None:
            if self._has(key):
                self._remove_key(key)
            return None
        self._store(key, value)
        return value

    def merge(self, key: Any, value: Any, function: Callable[[Any, Any], Any]) -> Any:
        require_argument(value, "a merge value")
        require_argument(function, "a remapping function")
        self.policy.check_element(key)
        self.policy.check_mutable("merge")
        current = self.get(key)
        merged = value if current is None else function(current, value)
        if merged is None:
            self._remove_key(key)
            return None
        self._store(key, merged)
        return merged

    def for_each(self, action: Callable[[Any, Any], Any]) -> None:
        require_argument(action, "an action")
        for k, v in self.entry_set():
            action(k, v)

    def replace_all(self, function: Callable[[Any, Any], Any]) -> None:
        require_argument(function, "a function")
        self.policy.check_mutable("replace_all")
        replacements = {k: function(k, v) for k, v in list(self._data.items())}
        for v in replacements.values():
            self.policy.check_element(v)
        self._data.update(replacements)

    # -- views -----------------------------------------------------------------------------

    def key_set(self) -> "KeySetView":
        return KeySetView(self)

    def values(self) -> "ValuesView":
        return ValuesView(self)

    def entry_set(self) -> "EntrySetView":
        return EntrySetView(self)

    def to_array(self, buffer: Any = None) -> Any:
        return materialize(list(self._data.items()), buffer)

    def copy(self) -> "MapAdapter":
        return type(self)(dict(self._data), ordered=self.ordered, policy=self.policy)

    __copy__ = copy

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, (MapAdapter, Mapping)):
            return map_equal(self._data.items(), entries_of(other))
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def hash_code(self) -> int:
        return map_hash(self._data.items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class _MapView(AbstractCollection):
    """Live view over a MapAdapter; additions are always rejected."""

    def __init__(self, backing: MapAdapter) -> None:
        self._map = backing
        self.policy = backing.policy

    @property
    def _mod_count(self) -> int:
        return self._map._mod_count

    def _remove_key(self, key: Any) -> None:
        self._map._remove_key(key)

    def size(self) -> int:
        return self._map.size()

    def add(self, element: Any) -> bool:
        raise UnsupportedMutationError(f"add() through a {type(self).__name__}")

    def add_all(self, items: Iterable[Any]) -> bool:
        raise UnsupportedMutationError(f"add_all() through a {type(self).__name__}")

    def clear(self) -> None:
        self._map.clear()


class KeySetView(_MapView):
    is_set_view = True

    def __iter__(self) -> Iterator[Any]:
        return FailFastIterator(self, self._map._data)

    def contains(self, item: Any) -> bool:
        return self._map.contains_key(item)

    def remove(self, item: Any) -> bool:
        self.policy.check_structural("remove")
        if not self._map.contains_key(item):
            return False
        self._map._remove_key(item)
        return True

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (AbstractCollection, set, frozenset)):
            return set_equal(self, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def hash_code(self) -> int:
        return set_hash(self)


class ValuesView(_MapView):
    """Values in key order; a collection, neither a set nor a sequence."""

    __capabilities__ = (
        Capability.SIZED,
        Capability.ITERABLE,
        Capability.MEMBERSHIP,
        Capability.MUTABLE,
        Capability.ARRAY,
    )

    def __iter__(self) -> Iterator[Any]:
        data = self._map._data
        return FailFastIterator(self, data, lambda k: data[k])

    def contains(self, item: Any) -> bool:
        return self._map.contains_value(item)


class EntrySetView(_MapView):
    """Entries as ``(key, value)`` tuples."""

    is_set_view = True

    def __iter__(self) -> Iterator[Any]:
        data = self._map._data
        return FailFastIterator(self, data, lambda k: (k, data[k]))

    def contains(self, item: Any) -> bool:
        try:
            key, value = item
        except (TypeError, ValueError):
            return False
        return self._map.contains_key(key) and elements_equal(self._map.get(key), value)

    def remove(self, item: Any) -> bool:
        self.policy.check_structural("remove")
        if not self.contains(item):
            return False
        self._map._remove_key(item[0])
        return True

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (AbstractCollection, set, frozenset)):
            return set_equal(self, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def hash_code(self) -> int:
        return map_hash(self)
