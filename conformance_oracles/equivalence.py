"""
Equivalence utilities shared by every oracle.

Null-safe element equality, structural equality for sequences, sets and
maps, and the documented content-hash formulas. Nothing here requires
elements to be hashable: set and map comparisons use mutual containment
by linear scan, so containers of lists or dicts compare correctly.
"""

from __future__ import annotations

from typing import Any, Iterable

_INT32 = 1 << 32


def elements_equal(a: Any, b: Any) -> bool:
    """``a is None ? b is None : a == b`` with the result forced to bool."""
    if a is None:
        return b is None
    if b is None:
        return False
    return bool(a == b)


def contains_equal(items: Iterable[Any], target: Any) -> bool:
    """Linear null-safe membership scan."""
    return any(elements_equal(target, item) for item in items)


def count_equal(items: Iterable[Any], target: Any) -> int:
    return sum(1 for item in items if elements_equal(target, item))


def sequence_equal(a: Iterable[Any], b: Iterable[Any]) -> bool:
    """Same length and pairwise equal in order."""
    left, right = list(a), list(b)
    if len(left) != len(right):
        return False
    return all(elements_equal(x, y) for x, y in zip(left, right))


def set_equal(a: Iterable[Any], b: Iterable[Any]) -> bool:
    """Same size and mutual containment."""
    left, right = list(a), list(b)
    if len(left) != len(right):
        return False
    return all(contains_equal(right, x) for x in left) and all(
        contains_equal(left, y) for y in right
    )


def multiset_equal(a: Iterable[Any], b: Iterable[Any]) -> bool:
    """Same elements with the same multiplicities, order ignored."""
    left, remaining = list(a), list(b)
    if len(left) != len(remaining):
        return False
    for x in left:
        for i, y in enumerate(remaining):
            if elements_equal(x, y):
                del remaining[i]
                break
        else:
            return False
    return not remaining


def map_equal(a: Iterable[tuple[Any, Any]], b: Iterable[tuple[Any, Any]]) -> bool:
    """Same entry set, comparing (key, value) pairs with ``set_equal``."""
    return set_equal([tuple(e) for e in a], [tuple(e) for e in b])


def hash_of(x: Any) -> int:
    """0 for None, the subject's ``hash_code()`` if it has one, else ``hash()``."""
    if x is None:
        return 0
    hash_code = getattr(x, "hash_code", None)
    if callable(hash_code):
        return hash_code()
    return hash(x)


def wrap32(value: int) -> int:
    """Reduce an arbitrary int to a signed 32-bit value."""
    value &= _INT32 - 1
    return value - _INT32 if value >= 1 << 31 else value


def sequence_hash(elements: Iterable[Any]) -> int:
    """``h = 31 * h + hash_of(e)`` starting from 1."""
    h = 1
    for e in elements:
        h = wrap32(31 * h + hash_of(e))
    return h


def set_hash(elements: Iterable[Any]) -> int:
    """Sum of element hashes."""
    return wrap32(sum(hash_of(e) for e in elements))


def map_hash(entries: Iterable[tuple[Any, Any]]) -> int:
    """Sum over entries of ``hash_of(key) ^ hash_of(value)``."""
    return wrap32(sum(hash_of(k) ^ hash_of(v) for k, v in entries))
