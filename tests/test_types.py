"""Tests for the core data models."""

import pytest

from conformance_oracles.errors import IndexOutOfRangeError
from conformance_oracles.types import (
    PRIORITY_CHAIN,
    Capability,
    ErrorKind,
    Operation,
    Outcome,
    Verdict,
)


class TestVerdict:
    def test_values(self):
        assert Verdict.PASS == "pass"
        assert Verdict.FAIL == "fail"
        assert Verdict.INAPPLICABLE == "inapplicable"

    @pytest.mark.parametrize("condition,expected", [(True, Verdict.PASS), (False, Verdict.FAIL)])
    def test_of(self, condition, expected):
        assert Verdict.of(condition) is expected


class TestErrorKind:
    def test_chain_order(self):
        assert PRIORITY_CHAIN == (
            ErrorKind.NULL_NOT_PERMITTED,
            ErrorKind.TYPE_MISMATCH,
            ErrorKind.ILLEGAL_ARGUMENT,
            ErrorKind.INDEX_OUT_OF_RANGE,
            ErrorKind.UNSUPPORTED_MUTATION,
        )

    @pytest.mark.parametrize(
        "kind",
        [
            ErrorKind.CONCURRENT_STRUCTURAL_CHANGE,
            ErrorKind.MONITOR_NOT_OWNED,
            ErrorKind.INTERRUPTED_WAIT,
        ],
    )
    def test_orthogonal_kinds(self, kind):
        assert kind.orthogonal
        assert kind.priority == -1

    def test_priority_ranks(self):
        assert ErrorKind.NULL_NOT_PERMITTED.priority == 0
        assert ErrorKind.UNSUPPORTED_MUTATION.priority == 4
        assert not ErrorKind.TYPE_MISMATCH.orthogonal


class TestCapability:
    def test_string_values(self):
        assert Capability.SET_LIKE == "set_like"
        assert Capability("monitor") is Capability.MONITOR


class TestOutcome:
    def test_capture_return(self):
        outcome = Outcome.capture(lambda x: x * 2, 21)
        assert not outcome.raised
        assert outcome.value == 42
        assert outcome.kind is None
        assert outcome.describe() == "returned 42"

    def test_capture_error(self):
        def boom():
            raise IndexOutOfRangeError("index 5 out of range")

        outcome = Outcome.capture(boom)
        assert outcome.raised
        assert outcome.kind is ErrorKind.INDEX_OUT_OF_RANGE
        assert "index_out_of_range" in outcome.describe()

    def test_unclassified_error(self):
        def boom():
            raise KeyError("k")

        outcome = Outcome.capture(boom)
        assert outcome.raised
        assert outcome.kind is None
        assert "unclassified" in outcome.describe()


class TestOperation:
    def test_apply(self):
        op = Operation("insert", (1, 99))
        target = [10, 20]
        outcome = op.apply(target)
        assert not outcome.raised
        assert target == [10, 99, 20]

    def test_apply_missing_method(self):
        outcome = Operation("no_such_method").apply([])
        assert isinstance(outcome.error, AttributeError)

    def test_describe(self):
        op = Operation("merge", ("k", 1), {"function": None})
        assert op.describe() == "merge('k', 1, function=None)"

    def test_dict_round_trip(self):
        op = Operation("put", ("a", 1), {"flag": True})
        d = op.to_dict()
        assert d == {"name": "put", "args": ["a", 1], "kwargs": {"flag": True}}
        restored = Operation.from_dict(d)
        assert restored.name == "put"
        assert restored.args == ("a", 1)
        assert dict(restored.kwargs) == {"flag": True}

    def test_from_dict_defaults(self):
        op = Operation.from_dict({"name": "clear"})
        assert op.args == ()
        assert dict(op.kwargs) == {}
