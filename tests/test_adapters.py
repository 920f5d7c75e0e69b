"""Tests for the reference container adapters."""

import array
import threading
from types import MappingProxyType

import pytest

from conformance_oracles.adapters import (
    MapAdapter,
    SequenceAdapter,
    SetAdapter,
    adapt,
    build_adapter,
)
from conformance_oracles.adapters.base import ElementPolicy, materialize
from conformance_oracles.cancellation import CancellationToken
from conformance_oracles.errors import (
    ConcurrentModificationError,
    IllegalArgumentError,
    IllegalStateError,
    IndexOutOfRangeError,
    InterruptedWaitError,
    MonitorNotOwnedError,
    NullNotPermittedError,
    TypeMismatchError,
    UnsupportedMutationError,
)


class TestFactory:
    def test_build_each_shape(self):
        assert isinstance(build_adapter("sequence", [1]), SequenceAdapter)
        assert isinstance(build_adapter("set", [1]), SetAdapter)
        assert isinstance(build_adapter("map", {"a": 1}), MapAdapter)

    def test_unknown_shape(self):
        with pytest.raises(ValueError, match="Unknown adapter shape"):
            build_adapter("queue")

    @pytest.mark.parametrize(
        "container,klass,read_only",
        [
            ([1, 2], SequenceAdapter, False),
            ((1, 2), SequenceAdapter, True),
            ({1, 2}, SetAdapter, False),
            (frozenset({1}), SetAdapter, True),
            ({"a": 1}, MapAdapter, False),
            (MappingProxyType({"a": 1}), MapAdapter, True),
        ],
    )
    def test_adapt(self, container, klass, read_only):
        adapted = adapt(container)
        assert isinstance(adapted, klass)
        assert adapted.read_only is read_only

    def test_adapt_unknown(self):
        with pytest.raises(ValueError):
            adapt(42)


class TestElementPolicy:
    def test_null(self):
        with pytest.raises(NullNotPermittedError):
            ElementPolicy(permits_none=False).check_element(None)

    def test_type(self):
        with pytest.raises(TypeMismatchError):
            ElementPolicy(element_type=int).check_element("x")

    def test_bulk_none(self):
        with pytest.raises(NullNotPermittedError):
            ElementPolicy().check_elements(None)

    def test_fixed_size_allows_set_but_not_structural(self):
        policy = ElementPolicy(fixed_size=True)
        policy.check_mutable("set")
        with pytest.raises(UnsupportedMutationError):
            policy.check_structural("add")


class TestMaterialize:
    def test_fresh(self):
        assert materialize([1, 2]) == [1, 2]

    def test_reuses_large_buffer_with_sentinel(self):
        buffer = ["x"] * 5
        result = materialize([1, 2], buffer)
        assert result is buffer
        assert buffer == [1, 2, None, "x", "x"]

    def test_small_buffer_replaced(self):
        buffer = ["x"]
        result = materialize([1, 2], buffer)
        assert result is not buffer
        assert result == [1, 2]
        assert buffer == ["x"]

    def test_typed_buffer(self):
        result = materialize([1, 2], array.array("i"))
        assert isinstance(result, array.array)
        assert list(result) == [1, 2]

    def test_typed_buffer_mismatch(self):
        with pytest.raises(TypeMismatchError):
            materialize(["a"], array.array("i"))

    def test_unusable_buffer(self):
        with pytest.raises(TypeMismatchError):
            materialize([1], "not a buffer")


class TestSequenceAdapter:
    def test_insert_shifts(self, seq):
        seq.insert(1, 99)
        assert seq.to_array() == [10, 99, 20, 30]

    def test_get_bounds(self, seq):
        with pytest.raises(IndexOutOfRangeError):
            seq.get(3)
        with pytest.raises(IndexOutOfRangeError):
            seq.get(-1)
        with pytest.raises(IllegalArgumentError):
            seq.get("0")

    def test_set_returns_previous(self, seq):
        assert seq.set(0, 5) == 10
        assert seq.get(0) == 5

    def test_remove_first_occurrence(self):
        s = SequenceAdapter([1, 2, 1])
        assert s.remove(1) is True
        assert s.to_array() == [2, 1]
        assert s.remove(7) is False

    def test_read_only_rejects(self, read_only_seq):
        with pytest.raises(UnsupportedMutationError):
            read_only_seq.add(1)
        with pytest.raises(UnsupportedMutationError):
            read_only_seq.set(0, 1)

    def test_index_checked_before_mutability(self, read_only_seq):
        with pytest.raises(IndexOutOfRangeError):
            read_only_seq.remove_at(10)

    def test_fixed_size_allows_set(self):
        s = SequenceAdapter([1, 2], fixed_size=True)
        s.set(0, 9)
        assert s.get(0) == 9
        with pytest.raises(UnsupportedMutationError):
            s.add(3)

    def test_replace_all_is_atomic(self):
        s = SequenceAdapter([1, 2, 3], element_type=int)
        with pytest.raises(TypeMismatchError):
            s.replace_all(lambda e: "x" if e == 3 else e * 10)
        assert s.to_array() == [1, 2, 3]

    def test_sort_incomparable_keeps_order(self):
        s = SequenceAdapter([3, "a", 1])
        with pytest.raises(TypeError):
            s.sort()
        assert s.to_array() == [3, "a", 1]

    def test_sort_stable_with_key(self):
        s = SequenceAdapter(["bb", "a", "cc", "d"])
        s.sort(key=len)
        assert s.to_array() == ["a", "d", "bb", "cc"]

    def test_equality_and_hash(self):
        s = SequenceAdapter([1, 2])
        assert s == [1, 2]
        assert s == SequenceAdapter((1, 2))
        assert s != SequenceAdapter([2, 1])
        assert s.hash_code() == SequenceAdapter([1, 2]).hash_code()

    def test_fail_fast_iteration(self, seq):
        it = iter(seq)
        next(it)
        seq.remove_at(0)
        with pytest.raises(ConcurrentModificationError):
            next(it)

    def test_copy_is_independent(self, seq):
        dup = seq.copy()
        dup.add(40)
        assert seq.size() == 3
        assert dup.size() == 4


class TestListIterator:
    def test_walk(self, seq):
        it = seq.list_iterator(1)
        assert it.previous_index() == 0
        assert it.next() == 20
        assert it.previous() == 20

    def test_remove_without_next(self, seq):
        with pytest.raises(IllegalStateError):
            seq.list_iterator().remove()

    def test_remove_and_add(self, seq):
        it = seq.list_iterator()
        it.next()
        it.remove()
        it.add(5)
        assert seq.to_array() == [5, 20, 30]
        assert it.next() == 20

    def test_start_out_of_range(self, seq):
        with pytest.raises(IndexOutOfRangeError):
            seq.list_iterator(4)


class TestSubList:
    def test_write_through(self, seq):
        view = seq.sub_list(1, 3)
        view.set(0, 99)
        assert seq.get(1) == 99
        view.add(7)
        assert seq.to_array() == [10, 99, 30, 7]

    def test_clear_removes_range(self, seq):
        seq.sub_list(0, 2).clear()
        assert seq.to_array() == [30]

    def test_invalidated_by_backing_change(self, seq):
        view = seq.sub_list(0, 2)
        seq.add(40)
        with pytest.raises(ConcurrentModificationError):
            view.size()

    def test_range_checks(self, seq):
        with pytest.raises(IllegalArgumentError):
            seq.sub_list(2, 1)
        with pytest.raises(IndexOutOfRangeError):
            seq.sub_list(0, 4)


class TestSetAdapter:
    def test_add_reports_change(self, int_set):
        assert int_set.add(4) is True
        assert int_set.add(4) is False
        assert int_set.size() == 4

    def test_retain_all(self, int_set):
        assert int_set.retain_all([2, 3, 4]) is True
        assert int_set == {2, 3}

    def test_unhashable_probe(self, int_set):
        assert int_set.contains([1]) is False

    def test_iterator_remove(self, int_set):
        it = iter(int_set)
        first = next(it)
        it.remove()
        assert not int_set.contains(first)
        assert len(list(it)) == 2

    def test_hash_code(self, int_set):
        assert int_set.hash_code() == 6


class TestMapAdapter:
    def test_put_returns_previous(self, str_map):
        assert str_map.put("a", 5) == 1
        assert str_map.put("c", 3) is None
        assert str_map.get("a") == 5

    def test_compute_if_absent_present_key(self, str_map):
        called = []
        assert str_map.compute_if_absent("a", lambda k: called.append(k)) == 1
        assert called == []

    def test_merge(self, str_map):
        assert str_map.merge("a", 10, lambda old, new: old + new) == 11
        assert str_map.merge("z", 1, lambda old, new: old + new) == 1
        assert str_map.merge("a", 1, lambda old, new: None) is None
        assert not str_map.contains_key("a")

    def test_merge_none_value(self, str_map):
        with pytest.raises(NullNotPermittedError):
            str_map.merge("a", None, lambda old, new: new)

    def test_views_write_through(self, str_map):
        str_map.key_set().remove("a")
        assert not str_map.contains_key("a")
        str_map.values().remove(2)
        assert str_map.is_empty()

    def test_view_add_rejected(self, str_map):
        with pytest.raises(UnsupportedMutationError):
            str_map.key_set().add("z")
        with pytest.raises(UnsupportedMutationError):
            str_map.entry_set().add(("z", 1))

    def test_equality(self, str_map):
        assert str_map == {"a": 1, "b": 2}
        assert str_map != {"a": 1}
        assert str_map.entry_set() == {("a", 1), ("b", 2)}

    def test_read_only(self):
        m = adapt(MappingProxyType({"a": 1}))
        with pytest.raises(UnsupportedMutationError):
            m.put("b", 2)
        with pytest.raises(UnsupportedMutationError):
            m.key_set().clear()


class TestMonitor:
    def test_reentrant_ownership(self, monitor):
        assert not monitor.owned()
        with monitor:
            with monitor:
                assert monitor.owned()
            assert monitor.owned()
        assert not monitor.owned()

    @pytest.mark.parametrize("operation", ["wait", "notify", "notify_all", "release"])
    def test_requires_owner(self, monitor, operation):
        with pytest.raises(MonitorNotOwnedError):
            getattr(monitor, operation)()

    def test_negative_timeout(self, monitor):
        with monitor:
            with pytest.raises(IllegalArgumentError):
                monitor.wait(-1)

    def test_timed_wait_returns_false_and_reacquires(self, monitor):
        with monitor:
            assert monitor.wait(0.01) is False
            assert monitor.owned()

    def test_armed_token(self, monitor):
        token = CancellationToken()
        token.cancel()
        with monitor:
            with pytest.raises(InterruptedWaitError):
                monitor.wait(1.0, token=token)
            assert monitor.owned()
        assert not token.cancelled

    @pytest.mark.timing
    def test_cancel_during_wait(self, monitor):
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            with monitor:
                with pytest.raises(InterruptedWaitError):
                    monitor.wait(2.0, token=token)
        finally:
            timer.cancel()
        assert not token.cancelled

    @pytest.mark.timing
    def test_notified(self, monitor):
        def notifier():
            with monitor:
                monitor.notify()

        with monitor:
            threading.Timer(0.05, notifier).start()
            assert monitor.wait(2.0) is True
