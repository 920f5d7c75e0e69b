"""Tests for the associative-container oracles."""

import itertools
from types import MappingProxyType

import pytest

from conformance_oracles.adapters import MapAdapter, adapt, build_adapter
from conformance_oracles.oracles.mapping import (
    check_compute,
    check_compute_if_absent,
    check_compute_if_present,
    check_contains_key,
    check_contains_value,
    check_for_each,
    check_get_or_default,
    check_key_uniqueness,
    check_map_equals,
    check_map_get,
    check_map_hash,
    check_map_remove,
    check_map_replace_all,
    check_merge,
    check_put,
    check_put_all,
    check_put_if_absent,
    check_remove_entry,
    check_replace,
    check_replace_entry,
)
from conformance_oracles.types import Verdict


class EagerComputeIfAbsent(MapAdapter):
    """Invokes the mapping function before looking at the key."""

    def compute_if_absent(self, key, function):
        value = function(key)
        current = self.get(key)
        if current is not None:
            return current
        if value is not None:
            self.put(key, value)
        return value


class RepeatedReplaceAll(MapAdapter):
    """Runs the function over every entry twice."""

    def replace_all(self, function):
        super().replace_all(function)
        super().replace_all(function)


class PutReturnsNew(MapAdapter):
    def put(self, key, value):
        super().put(key, value)
        return value


@pytest.fixture
def frozen_map():
    return adapt(MappingProxyType({"a": 1}))


class TestComputeIfAbsent:
    def test_present_key_does_not_invoke(self, str_map):
        assert check_compute_if_absent(str_map, "a", lambda k: 42) == Verdict.PASS
        assert str_map.get("a") == 1

    def test_eager_invocation_fails(self):
        assert check_compute_if_absent(EagerComputeIfAbsent({"a": 1}), "a", lambda k: 42) == Verdict.FAIL

    def test_absent_key_stores(self, str_map):
        assert check_compute_if_absent(str_map, "z", lambda k: 26) == Verdict.PASS
        assert str_map.get("z") == 26

    def test_none_result_stores_nothing(self, str_map):
        assert check_compute_if_absent(str_map, "z", lambda k: None) == Verdict.PASS
        assert not str_map.contains_key("z")

    def test_none_function(self, str_map):
        assert check_compute_if_absent(str_map, "z", None) == Verdict.PASS

    def test_read_only(self, frozen_map):
        assert check_compute_if_absent(frozen_map, "z", lambda k: 1) == Verdict.PASS


class TestComputeFamily:
    def test_compute_if_present(self, str_map):
        assert check_compute_if_present(str_map, "a", lambda k, v: v + 1) == Verdict.PASS
        assert check_compute_if_present(str_map, "b", lambda k, v: None) == Verdict.PASS
        assert check_compute_if_present(str_map, "z", lambda k, v: 1) == Verdict.PASS

    def test_compute(self, str_map):
        assert check_compute(str_map, "a", lambda k, v: (v or 0) * 10) == Verdict.PASS
        assert check_compute(str_map, "z", lambda k, v: 5) == Verdict.PASS
        assert check_compute(str_map, "z", lambda k, v: None) == Verdict.PASS

    def test_merge(self, str_map):
        assert check_merge(str_map, "a", 10, lambda old, new: old + new) == Verdict.PASS
        assert check_merge(str_map, "z", 1, lambda old, new: old + new) == Verdict.PASS
        assert check_merge(str_map, "b", 1, lambda old, new: None) == Verdict.PASS

    def test_merge_none_value(self, str_map):
        assert check_merge(str_map, "a", None, lambda old, new: new) == Verdict.PASS

    def test_merge_none_mapped_key_skips_function(self):
        m = build_adapter("map", {"a": None})
        assert check_merge(m, "a", 3, lambda old, new: 99) == Verdict.PASS
        assert m.get("a") == 3


class TestKeyedMutation:
    def test_put(self, str_map):
        assert check_put(str_map, "a", 9) == Verdict.PASS
        assert check_put(str_map, "c", 3) == Verdict.PASS

    def test_put_returning_new_value_fails(self):
        assert check_put(PutReturnsNew({"a": 1}), "a", 2) == Verdict.FAIL

    def test_put_read_only(self, frozen_map):
        assert check_put(frozen_map, "a", 9) == Verdict.PASS

    def test_put_rejects_none_key_when_restricted(self):
        m = build_adapter("map", {"a": 1}, permits_none=False)
        assert check_put(m, None, 1) == Verdict.PASS

    def test_remove(self, str_map):
        assert check_map_remove(str_map, "a") == Verdict.PASS
        assert check_map_remove(str_map, "zz") == Verdict.PASS

    def test_put_all(self, str_map):
        assert check_put_all(str_map, {"a": 0, "c": 3}) == Verdict.PASS
        assert check_put_all(str_map, build_adapter("map", {"d": 4})) == Verdict.PASS
        assert check_put_all(str_map, None) == Verdict.PASS

    def test_put_if_absent(self, str_map):
        assert check_put_if_absent(str_map, "a", 5) == Verdict.PASS
        assert check_put_if_absent(str_map, "c", 5) == Verdict.PASS
        assert check_put_if_absent(build_adapter("map", {"n": None}), "n", 5) == Verdict.PASS

    def test_conditional_entries(self, str_map):
        assert check_remove_entry(str_map, "a", 2) == Verdict.PASS
        assert check_remove_entry(str_map, "a", 1) == Verdict.PASS
        assert check_replace_entry(str_map, "b", 9, 3) == Verdict.PASS
        assert check_replace_entry(str_map, "b", 2, 3) == Verdict.PASS

    def test_replace(self, str_map):
        assert check_replace(str_map, "a", 7) == Verdict.PASS
        assert check_replace(str_map, "q", 7) == Verdict.PASS
        assert not str_map.contains_key("q")

    def test_replace_all(self, str_map):
        assert check_map_replace_all(str_map, lambda k, v: f"{k}{v}") == Verdict.PASS
        assert check_map_replace_all(str_map, None) == Verdict.PASS

    def test_replace_all_stateful_function(self, str_map):
        counter = itertools.count()
        assert check_map_replace_all(str_map, lambda k, v: next(counter)) == Verdict.PASS
        assert sorted(str_map.get(k) for k in ("a", "b")) == [0, 1]

    def test_replace_all_repeated_calls_fail(self):
        assert check_map_replace_all(RepeatedReplaceAll({"a": 1}), lambda k, v: v + 1) == Verdict.FAIL


class TestQueries:
    def test_lookups(self, str_map):
        assert check_contains_key(str_map, "a") == Verdict.PASS
        assert check_contains_key(str_map, "z") == Verdict.PASS
        assert check_contains_value(str_map, 2) == Verdict.PASS
        assert check_contains_value(str_map, 3) == Verdict.PASS
        assert check_map_get(str_map, "a") == Verdict.PASS
        assert check_map_get(str_map, "z") == Verdict.PASS

    def test_get_or_default_keeps_none_mapping(self):
        m = build_adapter("map", {"a": None})
        assert check_get_or_default(m, "a", 5) == Verdict.PASS
        assert check_get_or_default(m, "b", 5) == Verdict.PASS

    def test_key_uniqueness_and_for_each(self, str_map):
        assert check_key_uniqueness(str_map) == Verdict.PASS
        assert check_for_each(str_map) == Verdict.PASS

    @pytest.mark.parametrize("other", [{"a": 1, "b": 2}, {"a": 1}, {"a": 1, "b": 3}, [("a", 1), ("b", 2)]])
    def test_equals(self, str_map, other):
        assert check_map_equals(str_map, other) == Verdict.PASS

    def test_hash(self, str_map):
        assert check_map_hash(str_map) == Verdict.PASS

    def test_not_a_map(self, seq):
        assert check_put(seq, "a", 1) == Verdict.INAPPLICABLE
