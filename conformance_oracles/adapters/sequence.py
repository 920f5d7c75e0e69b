"""
Indexed sequence adapter over a Python list, with list iterators and
sub-range views.

Argument validation runs in diagnosis order (null, type, argument value,
index, mutation support), so a call with several defects reports the most
specific one.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator

from conformance_oracles.adapters.base import (
    AbstractCollection,
    ElementPolicy,
    iterate,
    materialize,
    require_argument,
)
from conformance_oracles.equivalence import elements_equal, sequence_equal, sequence_hash
from conformance_oracles.errors import (
    ConcurrentModificationError,
    IllegalArgumentError,
    IllegalStateError,
    IndexOutOfRangeError,
)

LOG = logging.getLogger("conformance_oracles.adapters.sequence")


class AbstractSequence(AbstractCollection):
    """
    Contract operations over five storage primitives.

    Subclasses implement ``_length``, ``_item``, ``_store``,
    ``_insert_item`` and ``_delete_item``, and keep ``_mod_count`` in step
    with structural changes.
    """

    _mod_count: int = 0

    # -- primitives ---------------------------------------------------------------

    def _length(self) -> int:
        raise NotImplementedError

    def _item(self, index: int) -> Any:
        raise NotImplementedError

    def _store(self, index: int, element: Any) -> None:
        raise NotImplementedError

    def _insert_item(self, index: int, element: Any) -> None:
        raise NotImplementedError

    def _delete_item(self, index: int) -> Any:
        raise NotImplementedError

    def _check_comod(self) -> None:
        pass

    # -- bounds ---------------------------------------------------------------------

    def _check_index(self, index: Any, limit: int) -> int:
        if not isinstance(index, int) or isinstance(index, bool):
            raise IllegalArgumentError(f"index must be an int, not {type(index).__name__}")
        if index < 0 or index >= limit:
            raise IndexOutOfRangeError(f"index {index} out of range for size {self._length()}")
        return index

    def _element_index(self, index: Any) -> int:
        return self._check_index(index, self._length())

    def _position_index(self, index: Any) -> int:
        # insertion points include the end
        return self._check_index(index, self._length() + 1)

    # -- read ---------------------------------------------------------------------

    def size(self) -> int:
        self._check_comod()
        return self._length()

    def get(self, index: int) -> Any:
        self._check_comod()
        return self._item(self._element_index(index))

    def __iter__(self) -> Iterator[Any]:
        return ListIterator(self, 0)

    def contains(self, item: Any) -> bool:
        return self.index_of(item) >= 0

    def index_of(self, item: Any) -> int:
        self._check_comod()
        for i in range(self._length()):
            if elements_equal(item, self._item(i)):
                return i
        return -1

    def last_index_of(self, item: Any) -> int:
        self._check_comod()
        for i in range(self._length() - 1, -1, -1):
            if elements_equal(item, self._item(i)):
                return i
        return -1

    def to_array(self, buffer: Any = None) -> Any:
        self._check_comod()
        return materialize([self._item(i) for i in range(self._length())], buffer)

    # -- positional mutation ----------------------------------------------------------

    def set(self, index: int, element: Any) -> Any:
        self.policy.check_element(element)
        self._check_comod()
        index = self._element_index(index)
        self.policy.check_mutable("set")
        previous = self._item(index)
        self._store(index, element)
        return previous

    def add(self, element: Any) -> bool:
        self.policy.check_element(element)
        self._check_comod()
        self.policy.check_structural("add")
        self._insert_item(self._length(), element)
        return True

    def insert(self, index: int, element: Any) -> None:
        self.policy.check_element(element)
        self._check_comod()
        index = self._position_index(index)
        self.policy.check_structural("insert")
        self._insert_item(index, element)

    def remove_at(self, index: int) -> Any:
        self._check_comod()
        index = self._element_index(index)
        self.policy.check_structural("remove_at")
        return self._delete_item(index)

    def remove(self, item: Any) -> bool:
        self._check_comod()
        self.policy.check_structural("remove")
        index = self.index_of(item)
        if index < 0:
            return False
        self._delete_item(index)
        return True

    # -- bulk ---------------------------------------------------------------------------

    def add_all(self, items: Iterable[Any]) -> bool:
        elements = self.policy.check_elements(iterate(items))
        self._check_comod()
        self.policy.check_structural("add_all")
        for e in elements:
            self._insert_item(self._length(), e)
        return bool(elements)

    def add_all_at(self, index: int, items: Iterable[Any]) -> bool:
        elements = self.policy.check_elements(iterate(items))
        self._check_comod()
        index = self._position_index(index)
        self.policy.check_structural("add_all_at")
        for offset, e in enumerate(elements):
            self._insert_item(index + offset, e)
        return bool(elements)

    def _remove_where(self, predicate: Callable[[Any], bool], operation: str) -> bool:
        self._check_comod()
        self.policy.check_structural(operation)
        changed = False
        i = 0
        while i < self._length():
            if predicate(self._item(i)):
                self._delete_item(i)
                changed = True
            else:
                i += 1
        return changed

    def replace_all(self, operator: Callable[[Any], Any]) -> None:
        require_argument(operator, "an operator")
        self._check_comod()
        self.policy.check_mutable("replace_all")
        replacements = [operator(self._item(i)) for i in range(self._length())]
        for e in replacements:
            self.policy.check_element(e)
        for i, e in enumerate(replacements):
            self._store(i, e)

    def sort(self, key: Callable[[Any], Any] | None = None) -> None:
        """Stable sort; incomparable elements raise TypeError and leave the order intact."""
        self._check_comod()
        items = [self._item(i) for i in range(self._length())]
        items.sort(key=key)
        if len(items) > 1:
            self.policy.check_mutable("sort")
        for i, e in enumerate(items):
            self._store(i, e)

    def clear(self) -> None:
        self._check_comod()
        self.policy.check_structural("clear")
        for i in range(self._length() - 1, -1, -1):
            self._delete_item(i)

    # -- derived views ------------------------------------------------------------------

    def list_iterator(self, index: int = 0) -> "ListIterator":
        self._check_comod()
        return ListIterator(self, self._position_index(index))

    def sub_list(self, start: int, stop: int) -> "SubList":
        self._check_comod()
        if not isinstance(start, int) or not isinstance(stop, int):
            raise IllegalArgumentError("sub_list bounds must be ints")
        if start > stop:
            raise IllegalArgumentError(f"sub_list start {start} > stop {stop}")
        if start < 0 or stop > self._length():
            raise IndexOutOfRangeError(
                f"sub_list({start}, {stop}) out of range for size {self._length()}"
            )
        return SubList(self, start, stop - start)

    # -- equality ----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, AbstractSequence):
            return sequence_equal(self, other)
        if isinstance(other, (list, tuple)):
            return sequence_equal(self, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def hash_code(self) -> int:
        return sequence_hash(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_array()!r})"


class SequenceAdapter(AbstractSequence):
    """Reference sequence backed by a Python list."""

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        policy: ElementPolicy | None = None,
        **restrictions: Any,
    ) -> None:
        self.policy = policy or ElementPolicy(**restrictions)
        self._items: list[Any] = list(items)
        self._mod_count = 0
        for e in self._items:
            self.policy.check_element(e)

    def _length(self) -> int:
        return len(self._items)

    def _item(self, index: int) -> Any:
        return self._items[index]

    def _store(self, index: int, element: Any) -> None:
        self._items[index] = element

    def _insert_item(self, index: int, element: Any) -> None:
        self._items.insert(index, element)
        self._mod_count += 1

    def _delete_item(self, index: int) -> Any:
        self._mod_count += 1
        return self._items.pop(index)

    def copy(self) -> "SequenceAdapter":
        return type(self)(self._items, policy=self.policy)

    __copy__ = copy


class SubList(AbstractSequence):
    """
    Window ``[offset, offset + length)`` of a parent sequence.

    Changes through the window write through to the parent. A structural
    change made to the parent by any other path invalidates the window:
    every later call raises ConcurrentModificationError.
    """

    def __init__(self, parent: AbstractSequence, offset: int, length: int) -> None:
        self._parent = parent
        self._offset = offset
        self._size = length
        self.policy = parent.policy
        self._mod_count = parent._mod_count

    def _check_comod(self) -> None:
        self._parent._check_comod()
        if self._parent._mod_count != self._mod_count:
            raise ConcurrentModificationError("backing sequence structurally modified")

    def _length(self) -> int:
        return self._size

    def _item(self, index: int) -> Any:
        return self._parent._item(self._offset + index)

    def _store(self, index: int, element: Any) -> None:
        self._parent._store(self._offset + index, element)

    def _insert_item(self, index: int, element: Any) -> None:
        self._parent._insert_item(self._offset + index, element)
        self._mod_count = self._parent._mod_count
        self._size += 1

    def _delete_item(self, index: int) -> Any:
        removed = self._parent._delete_item(self._offset + index)
        self._mod_count = self._parent._mod_count
        self._size -= 1
        return removed

    def copy(self) -> SequenceAdapter:
        self._check_comod()
        return SequenceAdapter(self.to_array(), policy=self.policy)


class ListIterator:
    """
    Bidirectional fail-fast cursor over an AbstractSequence.

    The cursor sits between elements: ``next()`` returns the element after
    it, ``previous()`` the one before. ``set``/``remove`` act on the element
    last returned; ``add`` inserts at the cursor.
    """

    def __init__(self, owner: AbstractSequence, index: int = 0) -> None:
        self._owner = owner
        self._cursor = index
        self._last = -1
        self._expected = owner._mod_count

    def _check(self) -> None:
        self._owner._check_comod()
        if self._owner._mod_count != self._expected:
            raise ConcurrentModificationError("sequence modified during iteration")

    def __iter__(self) -> "ListIterator":
        return self

    def has_next(self) -> bool:
        return self._cursor < self._owner._length()

    def __next__(self) -> Any:
        self._check()
        if self._cursor >= self._owner._length():
            raise StopIteration
        value = self._owner._item(self._cursor)
        self._last = self._cursor
        self._cursor += 1
        return value

    next = __next__

    def has_previous(self) -> bool:
        return self._cursor > 0

    def previous(self) -> Any:
        self._check()
        if self._cursor <= 0:
            raise StopIteration
        self._cursor -= 1
        self._last = self._cursor
        return self._owner._item(self._cursor)

    def next_index(self) -> int:
        return self._cursor

    def previous_index(self) -> int:
        return self._cursor - 1

    def remove(self) -> None:
        if self._last < 0:
            raise IllegalStateError("remove() without a preceding next() or previous()")
        self._check()
        self._owner.policy.check_structural("remove")
        self._owner._delete_item(self._last)
        if self._last < self._cursor:
            self._cursor -= 1
        self._last = -1
        self._expected = self._owner._mod_count

    def set(self, element: Any) -> None:
        if self._last < 0:
            raise IllegalStateError("set() without a preceding next() or previous()")
        self._owner.policy.check_element(element)
        self._check()
        self._owner.policy.check_mutable("set")
        self._owner._store(self._last, element)

    def add(self, element: Any) -> None:
        self._owner.policy.check_element(element)
        self._check()
        self._owner.policy.check_structural("add")
        self._owner._insert_item(self._cursor, element)
        self._cursor += 1
        self._last = -1
        self._expected = self._owner._mod_count
