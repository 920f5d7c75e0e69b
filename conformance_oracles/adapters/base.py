"""
Shared machinery for the reference adapters.

The adapters implement the contract API over Python's built-in containers
so that harnesses have known-good subjects. This module holds what every
shape needs: the element policy (null/type/read-only restrictions), the
modification counter behind fail-fast iteration, the generic collection
algorithms, and array materialization.
"""

from __future__ import annotations

import array
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

from conformance_oracles.equivalence import contains_equal, elements_equal
from conformance_oracles.errors import (
    ConcurrentModificationError,
    IllegalStateError,
    NullNotPermittedError,
    TypeMismatchError,
    UnsupportedMutationError,
)

LOG = logging.getLogger("conformance_oracles.adapters.base")

_MISSING = object()


@dataclass(frozen=True)
class ElementPolicy:
    """Restrictions a container places on its elements and on mutation."""

    permits_none: bool = True
    element_type: type | tuple[type, ...] | None = None
    read_only: bool = False
    fixed_size: bool = False

    def check_element(self, element: Any) -> None:
        if element is None:
            if not self.permits_none:
                raise NullNotPermittedError("None not permitted as an element")
            return
        if self.element_type is not None and not isinstance(element, self.element_type):
            raise TypeMismatchError(
                f"{type(element).__name__} is not an instance of {_type_name(self.element_type)}"
            )

    def check_elements(self, elements: Iterable[Any] | None) -> list[Any]:
        """Validate every element of a bulk argument; returns them as a list."""
        if elements is None:
            raise NullNotPermittedError("None not permitted as a collection argument")
        items = list(elements)
        for e in items:
            self.check_element(e)
        return items

    def check_mutable(self, operation: str) -> None:
        if self.read_only:
            raise UnsupportedMutationError(f"{operation}() on a read-only container")

    def check_structural(self, operation: str) -> None:
        self.check_mutable(operation)
        if self.fixed_size:
            raise UnsupportedMutationError(f"{operation}() on a fixed-size container")


def require_argument(value: Any, what: str) -> Any:
    if value is None:
        raise NullNotPermittedError(f"None not permitted as {what}")
    return value


def _type_name(t: type | tuple[type, ...]) -> str:
    if isinstance(t, tuple):
        return " | ".join(x.__name__ for x in t)
    return t.__name__


def iterate(source: Any) -> list[Any]:
    """Elements of a bulk argument, which may be an adapter or any iterable."""
    if source is None:
        raise NullNotPermittedError("None not permitted as a collection argument")
    return list(iter(source))


def materialize(elements: list[Any], buffer: Any = None) -> Any:
    """
    Copy *elements* into an array.

    With no buffer a fresh list is returned. A list buffer that is large
    enough is filled in place and the slot immediately past the population
    set to None; a smaller one is replaced by a fresh list. An
    ``array.array`` buffer is typed: elements it cannot hold raise
    TypeMismatchError, otherwise it behaves like a list buffer without the
    sentinel.
    """
    if buffer is None:
        return list(elements)

    if isinstance(buffer, array.array):
        for e in elements:
            try:
                array.array(buffer.typecode, [e])
            except (TypeError, OverflowError) as exc:
                raise TypeMismatchError(
                    f"{type(e).__name__} cannot be stored in array('{buffer.typecode}')"
                ) from exc
        if len(buffer) < len(elements):
            return array.array(buffer.typecode, elements)
        for i, e in enumerate(elements):
            buffer[i] = e
        return buffer

    if not isinstance(buffer, list):
        raise TypeMismatchError(f"{type(buffer).__name__} is not a usable array buffer")
    if len(buffer) < len(elements):
        return list(elements)
    buffer[: len(elements)] = elements
    if len(buffer) > len(elements):
        buffer[len(elements)] = None
    return buffer


class FailFastIterator:
    """
    Iterator over a keyed store that detects structural modification.

    *owner* exposes ``_mod_count`` and ``_remove_key(key)``; *keys* is the
    key order at creation and *project* turns a key into the yielded item.
    Removing through ``remove()`` keeps the iterator valid.
    """

    def __init__(
        self,
        owner: Any,
        keys: Iterable[Any],
        project: Callable[[Any], Any] = lambda k: k,
    ) -> None:
        self._owner = owner
        self._keys = list(keys)
        self._project = project
        self._pos = 0
        self._last: Any = _MISSING
        self._expected = owner._mod_count

    def _check(self) -> None:
        if self._owner._mod_count != self._expected:
            raise ConcurrentModificationError("container modified during iteration")

    def __iter__(self) -> "FailFastIterator":
        return self

    def has_next(self) -> bool:
        return self._pos < len(self._keys)

    def __next__(self) -> Any:
        self._check()
        if self._pos >= len(self._keys):
            raise StopIteration
        key = self._keys[self._pos]
        self._pos += 1
        self._last = key
        return self._project(key)

    next = __next__

    def remove(self) -> None:
        if self._last is _MISSING:
            raise IllegalStateError("remove() without a preceding next()")
        self._check()
        self._owner._remove_key(self._last)
        self._last = _MISSING
        self._expected = self._owner._mod_count


class AbstractCollection(ABC):
    """
    Collection operations derived from iteration and ``size()``.

    Subclasses provide ``size``, ``__iter__`` (whose iterator supports
    ``remove()`` when the collection is mutable) and ``policy``.
    """

    policy: ElementPolicy = ElementPolicy()

    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def __iter__(self) -> Iterator[Any]: ...

    @property
    def read_only(self) -> bool:
        return self.policy.read_only

    def is_empty(self) -> bool:
        return self.size() == 0

    def contains(self, item: Any) -> bool:
        return contains_equal(iter(self), item)

    def contains_all(self, items: Iterable[Any]) -> bool:
        return all(self.contains(x) for x in iterate(items))

    def remove(self, item: Any) -> bool:
        self.policy.check_structural("remove")
        it = iter(self)
        for e in it:
            if elements_equal(item, e):
                it.remove()
                return True
        return False

    def remove_all(self, items: Iterable[Any]) -> bool:
        targets = iterate(items)
        return self._remove_where(lambda e: contains_equal(targets, e), "remove_all")

    def retain_all(self, items: Iterable[Any]) -> bool:
        keep = iterate(items)
        return self._remove_where(lambda e: not contains_equal(keep, e), "retain_all")

    def _remove_where(self, predicate: Callable[[Any], bool], operation: str) -> bool:
        self.policy.check_structural(operation)
        changed = False
        it = iter(self)
        for e in it:
            if predicate(e):
                it.remove()
                changed = True
        return changed

    def clear(self) -> None:
        self.policy.check_structural("clear")
        it = iter(self)
        for _ in it:
            it.remove()

    def to_array(self, buffer: Any = None) -> Any:
        return materialize(list(iter(self)), buffer)

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(iter(self))!r})"
