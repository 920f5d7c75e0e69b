"""Tests for the size, emptiness and membership oracles."""

import pytest

from conformance_oracles.adapters import SequenceAdapter, build_adapter
from conformance_oracles.oracles.collection import (
    check_clear,
    check_contains,
    check_contains_all,
    check_is_empty,
    check_size_matches_iteration,
    check_size_non_negative,
)
from conformance_oracles.types import Verdict


class OffByOneSize(SequenceAdapter):
    def size(self):
        return super().size() + 1


class ForgetfulClear(SequenceAdapter):
    def clear(self):
        if self._items:
            self._items.pop()
            self._mod_count += 1


class TestSizeAndEmptiness:
    @pytest.mark.parametrize("shape,items", [("sequence", [1, 2]), ("set", [1]), ("map", {"k": "v"})])
    def test_reference_adapters_pass(self, shape, items):
        subject = build_adapter(shape, items)
        assert check_size_non_negative(subject) == Verdict.PASS
        assert check_is_empty(subject) == Verdict.PASS

    def test_empty(self):
        assert check_is_empty(build_adapter("sequence")) == Verdict.PASS
        assert check_is_empty(build_adapter("set"), None) == Verdict.PASS

    def test_size_matches_iteration(self, seq, int_set):
        assert check_size_matches_iteration(seq) == Verdict.PASS
        assert check_size_matches_iteration(int_set) == Verdict.PASS
        assert check_size_matches_iteration(OffByOneSize([1, 2])) == Verdict.FAIL

    def test_builtin_list_is_inapplicable(self):
        assert check_size_non_negative([1, 2]) == Verdict.INAPPLICABLE


class TestMembership:
    @pytest.mark.parametrize("item", [20, 99, None, [10]])
    def test_contains(self, seq, item):
        assert check_contains(seq, item) == Verdict.PASS

    def test_contains_on_map_probes_keys(self, str_map):
        assert check_contains(str_map, "a") == Verdict.PASS
        assert check_contains(str_map, 1) == Verdict.PASS

    def test_contains_all(self, seq):
        assert check_contains_all(seq, [10, 30]) == Verdict.PASS
        assert check_contains_all(seq, [10, 31]) == Verdict.PASS
        assert check_contains_all(seq, []) == Verdict.PASS

    def test_contains_all_none(self, int_set):
        assert check_contains_all(int_set, None) == Verdict.PASS

    def test_contains_all_without_method_is_inapplicable(self, str_map):
        assert check_contains_all(str_map, ["a"]) == Verdict.INAPPLICABLE


class TestClear:
    def test_mutable(self, seq, int_set, str_map):
        assert check_clear(seq) == Verdict.PASS
        assert seq.is_empty()
        assert check_clear(int_set) == Verdict.PASS
        assert check_clear(str_map) == Verdict.PASS

    def test_read_only_refuses(self, read_only_seq):
        assert check_clear(read_only_seq) == Verdict.PASS
        assert read_only_seq.size() == 3

    def test_incomplete_clear_fails(self):
        assert check_clear(ForgetfulClear([1, 2, 3])) == Verdict.FAIL
