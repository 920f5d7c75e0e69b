"""Set adapter over a Python dict used as an insertion-ordered hash set."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator

from conformance_oracles.adapters.base import (
    AbstractCollection,
    ElementPolicy,
    FailFastIterator,
    iterate,
)
from conformance_oracles.equivalence import set_equal, set_hash

LOG = logging.getLogger("conformance_oracles.adapters.sets")


class SetAdapter(AbstractCollection):
    """
    Reference set. Elements must be hashable.

    With ``ordered=True`` the set documents insertion order as its
    iteration order; otherwise iteration order is unspecified (although in
    practice it is still insertion order).
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        ordered: bool = False,
        policy: ElementPolicy | None = None,
        **restrictions: Any,
    ) -> None:
        self.policy = policy or ElementPolicy(**restrictions)
        self.ordered = ordered
        self._data: dict[Any, None] = {}
        self._mod_count = 0
        for e in items:
            self.policy.check_element(e)
            self._data[e] = None

    def size(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return FailFastIterator(self, self._data)

    def contains(self, item: Any) -> bool:
        try:
            return item in self._data
        except TypeError:
            # unhashable probes cannot be members
            return False

    def _remove_key(self, key: Any) -> None:
        self.policy.check_structural("remove")
        del self._data[key]
        self._mod_count += 1

    def add(self, element: Any) -> bool:
        self.policy.check_element(element)
        self.policy.check_structural("add")
        if element in self._data:
            return False
        self._data[element] = None
        self._mod_count += 1
        return True

    def remove(self, item: Any) -> bool:
        self.policy.check_structural("remove")
        if not self.contains(item):
            return False
        self._remove_key(item)
        return True

    def add_all(self, items: Iterable[Any]) -> bool:
        elements = self.policy.check_elements(iterate(items))
        self.policy.check_structural("add_all")
        changed = False
        for e in elements:
            if e not in self._data:
                self._data[e] = None
                self._mod_count += 1
                changed = True
        return changed

    def copy(self) -> "SetAdapter":
        return type(self)(self._data, ordered=self.ordered, policy=self.policy)

    __copy__ = copy

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, (AbstractCollection, set, frozenset)) and _is_set(other):
            return set_equal(self, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def hash_code(self) -> int:
        return set_hash(self)


def _is_set(other: Any) -> bool:
    if isinstance(other, (set, frozenset, SetAdapter)):
        return True
    return bool(getattr(other, "is_set_view", False))
