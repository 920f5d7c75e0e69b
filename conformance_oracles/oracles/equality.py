"""
Equality, hashing, representation, duplication and teardown oracles.

The equality laws apply to any value. The hash oracles use ``hash_of``
(``hash_code()`` when present, else ``hash()``) and never assert that
unequal values hash differently.

Duplication is the explicit ``copy()`` capability (falling back to
``copy.copy``); teardown is an explicit ``close()`` called by the owner,
not a collector-driven finalizer.

Decision: D-009
"""

from __future__ import annotations

import copy as copy_module
import logging
from typing import Any, Callable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.config import OracleConfig
from conformance_oracles.equivalence import hash_of
from conformance_oracles.oracles.base import check, expect_return, fail, inapplicable, oracle
from conformance_oracles.oracles.support import Auxiliary, require_unchanged, resolve_config
from conformance_oracles.snapshot import Shape, Snapshot
from conformance_oracles.types import Capability, Outcome

LOG = logging.getLogger("conformance_oracles.oracles.equality")


def _equals(a: Any, b: Any) -> bool:
    result = a == b
    if result is NotImplemented:
        return False
    return bool(result)


# -- equality laws ------------------------------------------------------------------------------


@oracle("equality")
def check_equals_reflexive(a: Any) -> None:
    """a == a."""
    check(_equals(a, a), "%r is not equal to itself", a)


@oracle("equality")
def check_equals_symmetric(a: Any, b: Any) -> None:
    """a == b exactly when b == a."""
    ab, ba = _equals(a, b), _equals(b, a)
    check(ab == ba, "a == b is %s but b == a is %s", ab, ba)


@oracle("equality")
def check_equals_transitive(a: Any, b: Any, c: Any) -> None:
    """a == b and b == c imply a == c."""
    if not (_equals(a, b) and _equals(b, c)):
        inapplicable("premise a == b == c does not hold")
    check(_equals(a, c), "a == b and b == c but a != c")


@oracle("equality")
def check_equals_consistent(a: Any, b: Any, repeat: int = 3) -> None:
    """Repeated comparisons of unmodified values agree."""
    first = _equals(a, b)
    for _ in range(repeat - 1):
        check(_equals(a, b) == first, "a == b changed between calls without modification")


@oracle("equality")
def check_not_equal_none(a: Any) -> None:
    """A value never equals None, and comparing with None does not raise."""
    if a is None:
        inapplicable("subject is None")
    outcome = Outcome.capture(lambda: a == None)  # noqa: E711
    result = expect_return(outcome)
    check(result is NotImplemented or not result, "%r == None is %r", a, result)


@oracle("equality", Capability.HASHABLE)
def check_hash_deterministic(a: Any, repeat: int = 3) -> None:
    """The hash of an unmodified value is the same on every call."""
    first = hash_of(a)
    for _ in range(repeat - 1):
        again = hash_of(a)
        check(again == first, "hash changed from %r to %r without modification", first, again)


@oracle("equality", Capability.HASHABLE)
def check_equal_hashes(a: Any, b: Any) -> None:
    """Equal values have equal hashes; unequal values are unconstrained."""
    if not _equals(a, b):
        return
    if Capability.HASHABLE not in capabilities_of(b):
        fail("%r equals an unhashable value", a)
    ha, hb = hash_of(a), hash_of(b)
    check(ha == hb, "equal values hash to %r and %r", ha, hb)


@oracle("equality")
def check_stable_type(a: Any) -> None:
    """The runtime type does not change across comparisons and hashing."""
    before = type(a)
    check(a.__class__ is before, "__class__ is %r, type() is %r", a.__class__, before)
    _equals(a, a)
    if Capability.HASHABLE in capabilities_of(a):
        hash_of(a)
    check(type(a) is before, "type changed from %s to %s", before.__name__, type(a).__name__)


# -- representation ---------------------------------------------------------------------------


@oracle("equality")
def check_repr_reproducible(a: Any) -> None:
    """repr() of an unmodified value is the same on every call."""
    first = expect_return(Outcome.capture(repr, a))
    check(isinstance(first, str), "repr() returned %s", type(first).__name__)
    check(repr(a) == first, "repr() changed without modification")


@oracle("equality")
def check_repr_informative(a: Any) -> None:
    """repr() says more than the default type-and-address form."""
    text = repr(a)
    check(text != object.__repr__(a), "repr() is the default %r", text)
    check(text.strip() != "", "repr() is blank")


# -- duplication --------------------------------------------------------------------------------


def duplicate(a: Any) -> Any:
    """``a.copy()`` when the subject offers it, otherwise ``copy.copy``."""
    method = getattr(a, "copy", None)
    if callable(method):
        return method()
    return copy_module.copy(a)


@oracle("duplication", Capability.DUPLICABLE)
def check_copy_distinct(a: Any) -> None:
    """A copy is a different object."""
    check(duplicate(a) is not a, "copy() returned the source object")


@oracle("duplication", Capability.DUPLICABLE)
def check_copy_same_type(a: Any) -> None:
    """A copy has the source's runtime type."""
    dup = duplicate(a)
    check(type(dup) is type(a), "copy() of %s is a %s", type(a).__name__, type(dup).__name__)


@oracle("duplication", Capability.DUPLICABLE)
def check_copy_equal(a: Any) -> None:
    """A copy equals its source, in both directions."""
    dup = duplicate(a)
    check(_equals(dup, a) and _equals(a, dup), "copy() is not equal to its source")


@oracle("duplication", Capability.DUPLICABLE, Capability.ITERABLE)
def check_copy_independent(a: Any, mutate: Callable[[Any], Any]) -> None:
    """Mutating a copy leaves the source untouched."""
    snap = Snapshot.capture(a)
    dup = duplicate(a)
    outcome = Outcome.capture(mutate, dup)
    if outcome.raised:
        inapplicable("mutation of the copy was refused: %s", outcome.describe())
    if snap.matches(dup):
        inapplicable("mutation did not change the copy")
    require_unchanged(snap, a, "mutating the copy")


@oracle("duplication", Capability.DUPLICABLE, Capability.ITERABLE)
def check_copy_shallow(a: Any) -> None:
    """A copy holds the same element objects, not copies of them."""
    snap = Snapshot.capture(a)
    dup = Snapshot.capture(duplicate(a), snap.shape)
    originals = list(snap.elements) + list(snap.values or ())
    copied = list(dup.elements) + list(dup.values or ())
    if snap.shape is Shape.SEQUENCE:
        pairs = zip(originals, copied)
        check(all(x is y for x, y in pairs), "copy() duplicated element objects")
        return
    for item in copied:
        check(any(item is orig for orig in originals), "copy() holds %r, not one of the source's objects", item)


# -- teardown -----------------------------------------------------------------------------------


@oracle("teardown", Capability.TEARDOWN)
def check_teardown_completes(a: Any) -> None:
    """close() returns without raising."""
    expect_return(Outcome.capture(a.close))


@oracle("teardown", Capability.TEARDOWN)
def check_teardown_idempotent(a: Any) -> None:
    """A second close() is a no-op, not an error."""
    expect_return(Outcome.capture(a.close))
    outcome = Outcome.capture(a.close)
    check(not outcome.raised, "second close() %s", outcome.describe())


@oracle("teardown", Capability.TEARDOWN, Capability.MONITOR)
def check_teardown_releases_monitor(a: Any, *, config: OracleConfig | None = None) -> None:
    """After close() another thread can take the object's monitor."""
    cfg = resolve_config(config)
    expect_return(Outcome.capture(a.close))
    acquired: list[bool] = []

    def contend() -> None:
        got = a.acquire(True, cfg.wait_timeout_s)
        acquired.append(bool(got))
        if got:
            a.release()

    Auxiliary(contend, "teardown-contender").start().finish(cfg)
    check(acquired == [True], "monitor still held after close()")
