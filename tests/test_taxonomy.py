"""Tests for the exception taxonomy matcher and the error hierarchy."""

import threading

import pytest

from conformance_oracles.errors import (
    ERROR_CLASSES,
    ConcurrentModificationError,
    IllegalStateError,
    NullNotPermittedError,
    TypeMismatchError,
)
from conformance_oracles.taxonomy import candidate_kinds, classify, dominant, matches
from conformance_oracles.types import ErrorKind


def _raised(func):
    try:
        func()
    except Exception as exc:
        return exc
    raise AssertionError("expected an exception")


class TestContractErrors:
    @pytest.mark.parametrize("kind,klass", list(ERROR_CLASSES.items()))
    def test_each_class_classifies_as_its_kind(self, kind, klass):
        assert classify(klass("x")) is kind

    def test_builtin_bases(self):
        assert issubclass(NullNotPermittedError, TypeError)
        assert issubclass(TypeMismatchError, TypeError)
        assert issubclass(ConcurrentModificationError, RuntimeError)

    def test_illegal_state_reports_illegal_argument(self):
        assert classify(IllegalStateError("remove() twice")) is ErrorKind.ILLEGAL_ARGUMENT


class TestBuiltinErrors:
    def test_index_error(self):
        assert classify(_raised(lambda: [][3])) is ErrorKind.INDEX_OUT_OF_RANGE

    def test_type_error(self):
        assert classify(_raised(lambda: 1 + "a")) is ErrorKind.TYPE_MISMATCH

    def test_none_type_error_is_null(self):
        assert classify(_raised(lambda: None + 1)) is ErrorKind.NULL_NOT_PERMITTED

    def test_value_error(self):
        assert classify(_raised(lambda: "abc".index("z"))) is ErrorKind.ILLEGAL_ARGUMENT

    def test_key_error_is_unclassified(self):
        assert classify(_raised(lambda: {}["missing"])) is None

    def test_tuple_assignment_is_unsupported(self):
        def assign():
            t = (1, 2)
            t[0] = 5

        assert classify(_raised(assign)) is ErrorKind.UNSUPPORTED_MUTATION

    def test_frozenset_add_is_unsupported(self):
        assert classify(_raised(lambda: frozenset().add(1))) is ErrorKind.UNSUPPORTED_MUTATION

    def test_not_implemented_is_unsupported(self):
        assert classify(NotImplementedError("read-only")) is ErrorKind.UNSUPPORTED_MUTATION

    def test_dict_changed_size(self):
        def mutate_while_iterating():
            d = {"a": 1, "b": 2}
            for k in d:
                d["c"] = 3

        assert classify(_raised(mutate_while_iterating)) is ErrorKind.CONCURRENT_STRUCTURAL_CHANGE

    def test_condition_wait_without_lock(self):
        cond = threading.Condition()
        assert classify(_raised(lambda: cond.wait(0))) is ErrorKind.MONITOR_NOT_OWNED

    def test_interrupted_error(self):
        assert classify(InterruptedError()) is ErrorKind.INTERRUPTED_WAIT

    def test_unicode_encode_error_is_illegal_argument(self):
        assert classify(_raised(lambda: "\ud800".encode("utf-8"))) is ErrorKind.ILLEGAL_ARGUMENT

    def test_candidates_before_chain(self):
        exc = TypeError("unsupported operand type(s) for +: 'NoneType' and 'int'")
        assert candidate_kinds(exc) == {ErrorKind.TYPE_MISMATCH, ErrorKind.NULL_NOT_PERMITTED}
        assert classify(exc) is ErrorKind.NULL_NOT_PERMITTED


class TestDominant:
    @pytest.mark.parametrize(
        "kinds,expected",
        [
            ({ErrorKind.UNSUPPORTED_MUTATION, ErrorKind.INDEX_OUT_OF_RANGE}, ErrorKind.INDEX_OUT_OF_RANGE),
            ({ErrorKind.ILLEGAL_ARGUMENT, ErrorKind.INDEX_OUT_OF_RANGE}, ErrorKind.ILLEGAL_ARGUMENT),
            ({ErrorKind.TYPE_MISMATCH, ErrorKind.NULL_NOT_PERMITTED}, ErrorKind.NULL_NOT_PERMITTED),
            ({ErrorKind.UNSUPPORTED_MUTATION}, ErrorKind.UNSUPPORTED_MUTATION),
        ],
    )
    def test_chain(self, kinds, expected):
        assert dominant(kinds) is expected

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            dominant([])

    def test_orthogonal_raises(self):
        with pytest.raises(ValueError, match="Orthogonal"):
            dominant([ErrorKind.MONITOR_NOT_OWNED, ErrorKind.TYPE_MISMATCH])


class TestMatches:
    def test_matches(self):
        assert matches(IndexError("x"), ErrorKind.INDEX_OUT_OF_RANGE)
        assert not matches(IndexError("x"), ErrorKind.TYPE_MISMATCH)
        assert not matches(None, ErrorKind.TYPE_MISMATCH)
