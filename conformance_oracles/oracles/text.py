"""
Text value oracles.

Python strings are immutable sequences of code points, so most checks
compare a ``str`` method against an independent computation over the
code points. Each oracle judges the text operation the caller names
rather than any container contract.
"""

from __future__ import annotations

import codecs
import logging
import math
import re
import sys
from typing import Any

from conformance_oracles.oracles.base import check, expect_error, expect_return, oracle
from conformance_oracles.types import Capability, ErrorKind, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.text")

_INT_TEXT = re.compile(r"-?\d+")


def _occurrences(s: str, sub: str) -> list[int]:
    """Every index at which *sub* starts in *s*, overlapping, in order."""
    n = len(sub)
    return [i for i in range(len(s) - n + 1) if all(s[i + j] == sub[j] for j in range(n))]


def _literal_replace(s: str, old: str, new: str) -> str:
    if old == "":
        return new + new.join(s) + new if s else new
    out: list[str] = []
    i = 0
    while i < len(s):
        if s[i : i + len(old)] == old:
            out.append(new)
            i += len(old)
        else:
            out.append(s[i])
            i += 1
    return "".join(out)


# -- length and access ----------------------------------------------------------------------------


@oracle("text", Capability.TEXT)
def check_text_length(s: str) -> None:
    """len() counts code points."""
    count = sum(1 for _ in s)
    check(len(s) == count, "len() is %d, %d code points", len(s), count)


@oracle("text", Capability.TEXT)
def check_text_empty(s: str) -> None:
    """Emptiness, truthiness and equality with "" agree with the length."""
    empty = len(s) == 0
    check((not s) == empty, "truthiness disagrees with len() == %d", len(s))
    check((s == "") == empty, "equality with '' disagrees with len() == %d", len(s))


@oracle("text", Capability.TEXT)
def check_text_index(s: str, index: Any) -> None:
    """s[i] is the i-th code point for -len <= i < len; other integers are index_out_of_range."""
    outcome = Outcome.capture(lambda: s[index])
    if index is None:
        expect_error(outcome, ErrorKind.NULL_NOT_PERMITTED)
        return
    if not isinstance(index, int):
        expect_error(outcome, ErrorKind.TYPE_MISMATCH)
        return
    if not -len(s) <= index < len(s):
        expect_error(outcome, ErrorKind.INDEX_OUT_OF_RANGE)
        return
    points = list(s)
    value = expect_return(outcome)
    check(value == points[index], "s[%d] is %r, expected %r", index, value, points[index])


@oracle("text", Capability.TEXT)
def check_find(s: str, sub: str) -> None:
    """find() is the first occurrence and rfind() the last, -1 when absent."""
    found = _occurrences(s, sub)
    first = found[0] if found else -1
    last = found[-1] if found else -1
    check(s.find(sub) == first, "find(%r) is %d, expected %d", sub, s.find(sub), first)
    check(s.rfind(sub) == last, "rfind(%r) is %d, expected %d", sub, s.rfind(sub), last)
    check((sub in s) == bool(found), "(%r in s) disagrees with a scan", sub)


@oracle("text", Capability.TEXT)
def check_text_index_of(s: str, sub: str) -> None:
    """index() agrees with find() and raises illegal_argument when the substring is absent."""
    outcome = Outcome.capture(s.index, sub)
    expected = s.find(sub)
    if expected < 0:
        expect_error(outcome, ErrorKind.ILLEGAL_ARGUMENT)
        return
    check(expect_return(outcome) == expected, "index(%r) is %r, find() is %d", sub, outcome.value, expected)


@oracle("text", Capability.TEXT)
def check_affixes(s: str, affix: str) -> None:
    """startswith/endswith agree with slicing; the empty affix and s itself always match."""
    n = len(affix)
    check(s.startswith(affix) == (s[:n] == affix), "startswith(%r) disagrees with slicing", affix)
    tail = s[len(s) - n :] if n <= len(s) else None
    check(s.endswith(affix) == (tail == affix), "endswith(%r) disagrees with slicing", affix)
    check(s.startswith("") and s.endswith(""), "empty affix not matched")
    check(s.startswith(s) and s.endswith(s), "s is not its own affix")


@oracle("text", Capability.TEXT)
def check_slice(s: str, start: int | None, stop: int | None) -> None:
    """s[start:stop] holds the code points at the clamped positions."""
    positions = range(len(s))[start:stop]
    expected = "".join(s[i] for i in positions)
    result = s[start:stop]
    check(result == expected, "s[%r:%r] is %r, expected %r", start, stop, result, expected)
    check(len(result) == len(positions), "slice length %d, expected %d", len(result), len(positions))


@oracle("text", Capability.TEXT)
def check_concat(s: str, other: str) -> None:
    """s + other is s followed by other; "" is the identity."""
    result = s + other
    check(len(result) == len(s) + len(other), "len(s + other) is %d", len(result))
    check(result[: len(s)] == s and result[len(s) :] == other, "s + other is %r", result)
    check(s + "" == s and "" + s == s, "'' is not the identity for +")


# -- transformation ------------------------------------------------------------------------------


@oracle("text", Capability.TEXT)
def check_text_replace(s: str, old: str, new: str) -> None:
    """replace() substitutes literally, left to right, without overlaps."""
    expected = _literal_replace(s, old, new)
    result = s.replace(old, new)
    check(result == expected, "replace(%r, %r) is %r, expected %r", old, new, result, expected)
    if old and old not in s:
        check(result == s, "replace() of an absent substring changed the text")


@oracle("text", Capability.TEXT)
def check_split_join(s: str, sep: str | None) -> None:
    """split(sep) then sep.join() restores s; an empty separator is illegal_argument."""
    outcome = Outcome.capture(s.split, sep)
    if sep == "":
        expect_error(outcome, ErrorKind.ILLEGAL_ARGUMENT)
        return
    parts = expect_return(outcome)
    if sep is None:
        check(all(p and not any(c.isspace() for c in p) for p in parts), "whitespace split kept blanks: %r", parts)
        check(" ".join(parts) == " ".join(s.split()), "whitespace split is not stable")
        return
    check(sep.join(parts) == s, "join(split(%r)) is %r", sep, sep.join(parts))
    check(len(parts) == s.count(sep) + 1, "split(%r) produced %d parts", sep, len(parts))
    check(all(sep not in p for p in parts), "a part still contains %r", sep)


@oracle("text", Capability.TEXT)
def check_case_idempotent(s: str) -> None:
    """upper, lower and casefold are idempotent."""
    for name in ("upper", "lower", "casefold"):
        once = getattr(s, name)()
        twice = getattr(once, name)()
        check(once == twice, "%s() is not idempotent: %r then %r", name, once, twice)


@oracle("text", Capability.TEXT)
def check_caseless_equal(s: str, other: str) -> None:
    """Caseless equality is symmetric and implied by plain equality."""
    forward = s.casefold() == other.casefold()
    backward = other.casefold() == s.casefold()
    check(forward == backward, "caseless equality is not symmetric")
    if s == other:
        check(forward, "equal strings are not caselessly equal")


@oracle("text", Capability.TEXT)
def check_strip(s: str) -> None:
    """strip() removes whitespace from both ends only."""
    result = s.strip()
    check(result == s.lstrip().rstrip(), "strip() differs from lstrip().rstrip()")
    check(not result or not (result[0].isspace() or result[-1].isspace()), "strip() left edge whitespace")
    check(result in s, "strip() result is not a substring")
    check(s.lstrip().startswith(result), "strip() removed non-whitespace")


@oracle("text", Capability.TEXT)
def check_encode_round_trip(s: str, encoding: str = "utf-8") -> None:
    """Encoding and decoding reproduces s; unencodable text and unknown codecs are illegal_argument."""
    outcome = Outcome.capture(s.encode, encoding)
    try:
        codecs.lookup(encoding)
    except LookupError:
        expect_error(outcome, ErrorKind.ILLEGAL_ARGUMENT)
        return
    if not all(_encodable(ch, encoding) for ch in s):
        expect_error(outcome, ErrorKind.ILLEGAL_ARGUMENT)
        return
    data = expect_return(outcome)
    check(isinstance(data, bytes), "encode() returned %s", type(data).__name__)
    decoded = data.decode(encoding)
    check(decoded == s, "round trip through %s produced %r", encoding, decoded)


def _encodable(ch: str, encoding: str) -> bool:
    if 0xD800 <= ord(ch) <= 0xDFFF:
        return False
    try:
        ch.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


@oracle("text", Capability.TEXT)
def check_compare(s: str, other: str) -> None:
    """Ordering is total and follows the code point sequences."""
    relations = [s < other, s == other, s > other]
    check(relations.count(True) == 1, "<, ==, > gave %r", relations)
    expected = [ord(c) for c in s] < [ord(c) for c in other]
    check((s < other) == expected, "s < other is %s, code points say %s", s < other, expected)


@oracle("text", Capability.TEXT)
def check_utf16_units(s: str) -> None:
    """The UTF-16 encoding has one unit per BMP code point and two per supplementary one."""
    expected = sum(2 if ord(c) > 0xFFFF else 1 for c in s)
    units = len(s.encode("utf-16-le", "surrogatepass")) // 2
    check(units == expected, "%d UTF-16 units, expected %d", units, expected)


@oracle("text", Capability.TEXT)
def check_intern(s: str) -> None:
    """Interning returns one canonical object for equal strings."""
    canonical = sys.intern(s)
    rebuilt = "".join(list(s))
    check(canonical == s, "intern() changed the value")
    check(sys.intern(rebuilt) is canonical, "equal strings interned to different objects")


# -- numeric text -----------------------------------------------------------------------------------


@oracle("text")
def check_int_text_round_trip(n: int) -> None:
    """str(n) is a plain decimal literal that parses back to n."""
    text = str(n)
    check(_INT_TEXT.fullmatch(text) is not None, "str(%r) is %r", n, text)
    check(int(text) == n, "int(str(%r)) is %r", n, int(text))


@oracle("text")
def check_float_text_round_trip(x: float) -> None:
    """repr(x) parses back to the same float, NaN included."""
    back = float(repr(x))
    if math.isnan(x):
        check(math.isnan(back), "repr(nan) parsed to %r", back)
        return
    check(back == x, "float(repr(%r)) is %r", x, back)
    check(math.copysign(1.0, back) == math.copysign(1.0, x), "sign of %r lost", x)
