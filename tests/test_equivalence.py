"""Tests for the equivalence utilities."""

import pytest

from conformance_oracles.equivalence import (
    contains_equal,
    count_equal,
    elements_equal,
    hash_of,
    map_equal,
    map_hash,
    multiset_equal,
    sequence_equal,
    sequence_hash,
    set_equal,
    set_hash,
    wrap32,
)


class TestElementsEqual:
    @pytest.mark.parametrize(
        "a,b,expected",
        [
            (None, None, True),
            (None, 0, False),
            (0, None, False),
            (1, 1, True),
            (1, 1.0, True),
            ([1], [1], True),
            ("a", "b", False),
        ],
    )
    def test_null_safe(self, a, b, expected):
        assert elements_equal(a, b) is expected

    def test_contains_and_count(self):
        items = [1, None, [2], 1]
        assert contains_equal(items, None)
        assert contains_equal(items, [2])
        assert not contains_equal(items, 3)
        assert count_equal(items, 1) == 2


class TestStructuralEquality:
    def test_sequence_equal(self):
        assert sequence_equal([1, 2, 3], (1, 2, 3))
        assert not sequence_equal([1, 2, 3], [1, 3, 2])
        assert not sequence_equal([1, 2], [1, 2, 3])

    def test_set_equal_ignores_order(self):
        assert set_equal([1, 2, 3], [3, 1, 2])
        assert not set_equal([1, 2], [1, 3])

    def test_set_equal_unhashable_elements(self):
        assert set_equal([[1], {"a": 1}], [{"a": 1}, [1]])

    def test_multiset_counts_multiplicity(self):
        assert multiset_equal([1, 1, 2], [1, 2, 1])
        assert not multiset_equal([1, 1, 2], [1, 2, 2])

    def test_map_equal(self):
        assert map_equal([("a", 1), ("b", 2)], [("b", 2), ("a", 1)])
        assert not map_equal([("a", 1)], [("a", 2)])


class TestHashes:
    def test_hash_of_none_is_zero(self):
        assert hash_of(None) == 0

    def test_hash_of_prefers_hash_code(self):
        class Coded:
            def hash_code(self):
                return 7

        assert hash_of(Coded()) == 7

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (2**31 - 1, 2**31 - 1), (2**31, -(2**31)), (2**32, 0), (-1, -1)],
    )
    def test_wrap32(self, value, expected):
        assert wrap32(value) == expected

    def test_sequence_hash_formula(self):
        assert sequence_hash([]) == 1
        assert sequence_hash([1, 2]) == (31 * (31 * 1 + 1) + 2)

    def test_sequence_hash_order_sensitive(self):
        assert sequence_hash([1, 2]) != sequence_hash([2, 1])

    def test_set_hash_is_sum(self):
        assert set_hash([1, 2, 3]) == 6
        assert set_hash([3, 2, 1]) == set_hash([1, 2, 3])

    def test_map_hash_is_sum_of_xor(self):
        assert map_hash([(1, 3), (2, 2)]) == (1 ^ 3) + (2 ^ 2)
        assert map_hash([]) == 0
