"""Tests for the snapshot and differencing helper."""

from conformance_oracles.adapters import build_adapter
from conformance_oracles.snapshot import Shape, Snapshot, shape_of


class TestCapture:
    def test_shapes(self, seq, int_set, str_map):
        assert shape_of(seq) is Shape.SEQUENCE
        assert shape_of(int_set) is Shape.SET
        assert shape_of(str_map) is Shape.MAP
        assert shape_of("abc") is Shape.TEXT
        assert shape_of([1, 2]) is Shape.COLLECTION

    def test_sequence_capture(self, seq):
        snap = Snapshot.capture(seq)
        assert snap.elements == (10, 20, 30)
        assert snap.size == 3
        assert snap.values is None
        assert snap.entries == ()

    def test_map_capture(self, str_map):
        snap = Snapshot.capture(str_map)
        assert set(snap.entries) == {("a", 1), ("b", 2)}
        assert snap.lookup("a") == (True, 1)
        assert snap.lookup("z") == (False, None)

    def test_independent_of_subject(self, seq):
        snap = Snapshot.capture(seq)
        seq.add(40)
        assert snap.elements == (10, 20, 30)
        assert not snap.matches(seq)


class TestCompare:
    def test_set_order_irrelevant(self):
        a = Snapshot(Shape.SET, (1, 2, 3))
        b = Snapshot(Shape.SET, (3, 2, 1))
        assert a.same_state(b)

    def test_sequence_order_relevant(self):
        a = Snapshot(Shape.SEQUENCE, (1, 2, 3))
        b = Snapshot(Shape.SEQUENCE, (3, 2, 1))
        assert not a.same_state(b)

    def test_diff(self, seq):
        snap = Snapshot.capture(seq)
        seq.insert(1, 99)
        delta = snap.diff(seq)
        assert delta.size_before == 3
        assert delta.size_after == 4
        assert delta.size_delta == 1
        assert delta.added == (99,)
        assert delta.removed == ()
        assert delta.first_difference == 1
        assert not delta.unchanged

    def test_diff_unchanged(self, int_set):
        delta = Snapshot.capture(int_set).diff(int_set)
        assert delta.unchanged
        assert delta.size_delta == 0


class TestExpectedStates:
    def test_sequence_builders(self):
        snap = Snapshot(Shape.SEQUENCE, (10, 20, 30, 20))
        assert snap.after_insert(1, 99) == (10, 99, 20, 30, 20)
        assert snap.after_append((1, 2)) == (10, 20, 30, 20, 1, 2)
        assert snap.after_remove_at(0) == (20, 30, 20)
        assert snap.after_set(2, 0) == (10, 20, 0, 20)
        assert snap.after_remove_first(20) == (10, 30, 20)
        assert snap.after_remove_first(5) == snap.elements
        assert snap.after_filter(lambda e: e > 15) == (20, 30, 20)
        assert snap.index_of(20) == 1
        assert snap.last_index_of(20) == 3

    def test_unchanged_range(self):
        snap = Snapshot(Shape.SEQUENCE, (10, 20, 30))
        after = (10, 99, 20, 30)
        assert snap.unchanged_range(after, 0, 1)
        assert snap.unchanged_range(after, 1, 3, shift=1)
        assert not snap.unchanged_range(after, 1, 3)

    def test_map_builders(self):
        snap = Snapshot.capture(build_adapter("map", {"a": 1}))
        assert snap.after_put("a", 5) == (("a", 5),)
        assert snap.after_put("b", 2) == (("a", 1), ("b", 2))
        assert snap.after_remove_key("a") == ()
