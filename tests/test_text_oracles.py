"""Tests for the text value oracles."""

import pytest

from conformance_oracles.oracles.text import (
    check_affixes,
    check_caseless_equal,
    check_case_idempotent,
    check_compare,
    check_concat,
    check_encode_round_trip,
    check_find,
    check_float_text_round_trip,
    check_int_text_round_trip,
    check_intern,
    check_slice,
    check_split_join,
    check_strip,
    check_text_empty,
    check_text_index,
    check_text_index_of,
    check_text_length,
    check_text_replace,
    check_utf16_units,
)
from conformance_oracles.types import Verdict

SAMPLES = ["", "abc", "  padded\t", "naïve", "ß", "emoji 😀", "á"]


class BrokenFind(str):
    def find(self, sub, *args):
        return 0


class GrowingLower(str):
    def lower(self):
        return GrowingLower(str.lower(self) + "!")


class TestPerSample:
    @pytest.mark.parametrize("s", SAMPLES)
    def test_length_and_emptiness(self, s):
        assert check_text_length(s) == Verdict.PASS
        assert check_text_empty(s) == Verdict.PASS

    @pytest.mark.parametrize("s", SAMPLES)
    def test_transformations(self, s):
        assert check_case_idempotent(s) == Verdict.PASS
        assert check_strip(s) == Verdict.PASS
        assert check_utf16_units(s) == Verdict.PASS
        assert check_intern(s) == Verdict.PASS
        assert check_encode_round_trip(s) == Verdict.PASS


class TestIndexing:
    @pytest.mark.parametrize("index", [0, 2, -1, -3, 3, -4, None, "1", 1.0])
    def test_index(self, index):
        assert check_text_index("abc", index) == Verdict.PASS

    @pytest.mark.parametrize("sub", ["", "a", "ana", "z"])
    def test_find(self, sub):
        assert check_find("banana", sub) == Verdict.PASS
        assert check_text_index_of("banana", sub) == Verdict.PASS

    def test_broken_find(self):
        assert check_find(BrokenFind("abc"), "z") == Verdict.FAIL

    @pytest.mark.parametrize("affix", ["", "ba", "na", "banana", "bananas"])
    def test_affixes(self, affix):
        assert check_affixes("banana", affix) == Verdict.PASS

    @pytest.mark.parametrize("start,stop", [(None, None), (1, 3), (-2, None), (4, 1), (-100, 100)])
    def test_slice(self, start, stop):
        assert check_slice("banana", start, stop) == Verdict.PASS

    def test_concat(self):
        assert check_concat("ab", "cd") == Verdict.PASS
        assert check_concat("", "") == Verdict.PASS


class TestTransformations:
    @pytest.mark.parametrize(
        "s,old,new",
        [("banana", "an", "AN"), ("aaa", "aa", "b"), ("ab", "", "-"), ("", "", "x"), ("abc", "z", "y")],
    )
    def test_replace(self, s, old, new):
        assert check_text_replace(s, old, new) == Verdict.PASS

    @pytest.mark.parametrize("s,sep", [("a,b,,c", ","), ("abc", ","), ("a--b", "--"), ("  a  b ", None), ("x", "")])
    def test_split_join(self, s, sep):
        assert check_split_join(s, sep) == Verdict.PASS

    def test_case(self):
        assert check_caseless_equal("Straße", "STRASSE") == Verdict.PASS
        assert check_caseless_equal("a", "b") == Verdict.PASS
        assert check_case_idempotent(GrowingLower("Ab")) == Verdict.FAIL

    @pytest.mark.parametrize("s,encoding", [("\ud800", "utf-8"), ("é", "ascii"), ("abc", "no-such-codec")])
    def test_encode_rejections(self, s, encoding):
        assert check_encode_round_trip(s, encoding) == Verdict.PASS

    @pytest.mark.parametrize("s,other", [("a", "b"), ("b", "a"), ("ab", "a"), ("", ""), ("Z", "a")])
    def test_compare(self, s, other):
        assert check_compare(s, other) == Verdict.PASS


class TestNumericText:
    @pytest.mark.parametrize("n", [0, -42, 10**30])
    def test_int(self, n):
        assert check_int_text_round_trip(n) == Verdict.PASS

    @pytest.mark.parametrize("x", [0.1, -0.0, 1e300, float("inf"), float("nan")])
    def test_float(self, x):
        assert check_float_text_round_trip(x) == Verdict.PASS

    def test_non_text_subject(self, seq):
        assert check_text_length(seq) == Verdict.INAPPLICABLE
