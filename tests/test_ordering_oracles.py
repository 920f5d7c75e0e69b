"""Tests for the iteration, ordering and list-iterator oracles."""

import pytest

from conformance_oracles.adapters import SequenceAdapter, build_adapter
from conformance_oracles.oracles.ordering import (
    check_exhausted_iterator,
    check_iteration_matches_indexing,
    check_iteration_multiset,
    check_iteration_order,
    check_iteration_repeatable,
    check_list_iterator_add,
    check_list_iterator_bounds,
    check_list_iterator_remove,
    check_list_iterator_set,
    check_list_iterator_start,
    check_list_iterator_traversal,
)
from conformance_oracles.types import Verdict


class ReversedIteration(SequenceAdapter):
    def __iter__(self):
        return iter(list(reversed(self._items)))


class RestartingIterator:
    """Iterator that starts over once exhausted."""

    def __init__(self, items):
        self._items = items
        self._pos = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self._pos >= len(self._items):
            self._pos = 0
            raise StopIteration
        self._pos += 1
        return self._items[self._pos - 1]


class Restarting:
    def __init__(self, items):
        self._items = list(items)

    def __iter__(self):
        return RestartingIterator(self._items)


class TestIteration:
    def test_matches_indexing(self, seq):
        assert check_iteration_matches_indexing(seq) == Verdict.PASS
        assert check_iteration_matches_indexing(ReversedIteration([1, 2, 3])) == Verdict.FAIL

    def test_order(self, seq):
        assert check_iteration_order(seq) == Verdict.PASS
        assert check_iteration_order(build_adapter("set", [3, 1, 2], ordered=True)) == Verdict.PASS
        assert check_iteration_order(build_adapter("map", {"b": 1, "a": 2}, ordered=True)) == Verdict.PASS

    def test_unordered_set_is_not_order_checked(self, int_set):
        assert check_iteration_order(int_set) == Verdict.INAPPLICABLE

    @pytest.mark.parametrize("shape,items", [("sequence", [1, 1, 2]), ("set", [1, 2]), ("map", {"a": 1})])
    def test_multiset(self, shape, items):
        assert check_iteration_multiset(build_adapter(shape, items)) == Verdict.PASS

    def test_multiset_on_values_view(self):
        values = build_adapter("map", {"a": 1, "b": 1}).values()
        assert check_iteration_multiset(values) == Verdict.PASS

    def test_repeatable(self, seq, int_set):
        assert check_iteration_repeatable(seq) == Verdict.PASS
        assert check_iteration_repeatable(int_set) == Verdict.PASS
        assert check_iteration_repeatable([3, 1]) == Verdict.PASS

    def test_exhausted(self, seq):
        assert check_exhausted_iterator(seq) == Verdict.PASS
        assert check_exhausted_iterator([1, 2]) == Verdict.PASS
        assert check_exhausted_iterator(Restarting([1, 2])) == Verdict.FAIL


class TestListIterator:
    @pytest.mark.parametrize("index", [0, 1, 3, -1, 4, "1"])
    def test_start(self, seq, index):
        assert check_list_iterator_start(seq, index) == Verdict.PASS

    def test_bounds_and_traversal(self, seq):
        assert check_list_iterator_bounds(seq) == Verdict.PASS
        assert check_list_iterator_traversal(seq) == Verdict.PASS
        assert check_list_iterator_traversal(build_adapter("sequence")) == Verdict.PASS

    def test_set(self, seq):
        assert check_list_iterator_set(seq, 5) == Verdict.PASS
        assert seq.get(0) == 5

    def test_remove(self, seq):
        assert check_list_iterator_remove(seq) == Verdict.PASS
        assert seq.to_array() == [20, 30]

    def test_remove_fixed_size(self):
        assert check_list_iterator_remove(SequenceAdapter([1, 2], fixed_size=True)) == Verdict.PASS

    @pytest.mark.parametrize("index", [0, 1, 3])
    def test_add(self, seq, index):
        assert check_list_iterator_add(seq, index, 7) == Verdict.PASS

    def test_read_only_mutation_is_inapplicable(self, read_only_seq):
        assert check_list_iterator_set(read_only_seq, 1) == Verdict.INAPPLICABLE
        assert check_list_iterator_remove(read_only_seq) == Verdict.INAPPLICABLE
        assert check_list_iterator_add(read_only_seq, 0, 1) == Verdict.INAPPLICABLE
