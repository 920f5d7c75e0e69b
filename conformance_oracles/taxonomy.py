"""
Exception taxonomy matcher.

Maps a raised error to exactly one ErrorKind. Errors from the engine's own
hierarchy (``errors.py``) carry their kind; built-in exceptions are matched
by class and, where the class alone is ambiguous, by message patterns.

When more than one kind applies the fixed diagnosis chain decides:

    null_not_permitted > type_mismatch > illegal_argument
        > index_out_of_range > unsupported_mutation

The time/ownership kinds (concurrent_structural_change, monitor_not_owned,
interrupted_wait) are orthogonal: ``classify`` reports them, but they never
enter the chain and ``dominant`` refuses them.

Decision: D-004
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from conformance_oracles.errors import ContractError
from conformance_oracles.types import PRIORITY_CHAIN, ErrorKind

LOG = logging.getLogger("conformance_oracles.taxonomy")

# Patterns for built-in exceptions whose class alone does not decide the kind
_NULL_PATTERNS = [
    re.compile(r"NoneType", re.IGNORECASE),
    re.compile(r"\bnull\b", re.IGNORECASE),
    re.compile(r"\bNone\b (is )?not (permitted|allowed)", re.IGNORECASE),
]

_UNSUPPORTED_PATTERNS = [
    re.compile(r"does not support item (assignment|deletion)", re.IGNORECASE),
    re.compile(r"object is (immutable|read-only|readonly)", re.IGNORECASE),
    re.compile(r"unsupported operation", re.IGNORECASE),
    re.compile(
        r"has no attribute '(add|append|insert|remove|discard|pop|clear|update|put|set|extend)'",
        re.IGNORECASE,
    ),
]

_STRUCTURAL_CHANGE_PATTERNS = [
    re.compile(r"changed size during iteration", re.IGNORECASE),
    re.compile(r"(mutated|modified) during iteration", re.IGNORECASE),
    re.compile(r"concurrent(ly)? modifi", re.IGNORECASE),
]

_MONITOR_PATTERNS = [
    re.compile(r"un-?acquired lock", re.IGNORECASE),
    re.compile(r"release unlocked lock", re.IGNORECASE),
    re.compile(r"(lock|monitor) (is )?not (owned|held)", re.IGNORECASE),
]


def candidate_kinds(exc: BaseException) -> set[ErrorKind]:
    """Every kind *exc* could be read as, before the priority chain is applied."""
    kinds: set[ErrorKind] = set()

    if isinstance(exc, ContractError):
        for klass in type(exc).__mro__:
            if issubclass(klass, ContractError) and "kind" in vars(klass):
                kinds.add(klass.kind)
        return kinds

    message = str(exc)

    if isinstance(exc, RuntimeError):
        if _matches(_STRUCTURAL_CHANGE_PATTERNS, message):
            kinds.add(ErrorKind.CONCURRENT_STRUCTURAL_CHANGE)
        elif _matches(_MONITOR_PATTERNS, message):
            kinds.add(ErrorKind.MONITOR_NOT_OWNED)
        elif isinstance(exc, NotImplementedError):
            kinds.add(ErrorKind.UNSUPPORTED_MUTATION)
        return kinds

    if isinstance(exc, InterruptedError):
        kinds.add(ErrorKind.INTERRUPTED_WAIT)
        return kinds

    if isinstance(exc, TypeError):
        if _matches(_UNSUPPORTED_PATTERNS, message):
            kinds.add(ErrorKind.UNSUPPORTED_MUTATION)
        else:
            kinds.add(ErrorKind.TYPE_MISMATCH)
            if _matches(_NULL_PATTERNS, message):
                kinds.add(ErrorKind.NULL_NOT_PERMITTED)
    elif isinstance(exc, AttributeError):
        if _matches(_UNSUPPORTED_PATTERNS, message):
            kinds.add(ErrorKind.UNSUPPORTED_MUTATION)
    elif isinstance(exc, IndexError):
        kinds.add(ErrorKind.INDEX_OUT_OF_RANGE)
    elif isinstance(exc, (ValueError, LookupError, OverflowError)):
        # LookupError covers unknown codecs; KeyError is excluded below.
        if not isinstance(exc, KeyError):
            kinds.add(ErrorKind.ILLEGAL_ARGUMENT)

    return kinds


def classify(exc: BaseException) -> ErrorKind | None:
    """
    Classify a raised error into one ErrorKind.

    Args:
        exc: The error raised by the operation under test

    Returns:
        The single kind for the error, or None when it matches no kind
    """
    kinds = candidate_kinds(exc)
    if not kinds:
        LOG.debug("Unclassified %s: %s", type(exc).__name__, exc)
        return None

    chain = [k for k in kinds if not k.orthogonal]
    if chain:
        return dominant(chain)

    # Orthogonal kinds come from disjoint patterns, so at most one is present
    return next(iter(kinds))


def dominant(kinds: Iterable[ErrorKind]) -> ErrorKind:
    """
    Pick the kind that must be diagnosed first.

    Raises:
        ValueError: *kinds* is empty or contains an orthogonal kind
    """
    kinds = set(kinds)
    if not kinds:
        raise ValueError("dominant() needs at least one error kind")
    orthogonal = sorted(k.value for k in kinds if k.orthogonal)
    if orthogonal:
        raise ValueError(f"Orthogonal kinds are outside the priority chain: {orthogonal}")
    return min(kinds, key=PRIORITY_CHAIN.index)


def matches(exc: BaseException | None, kind: ErrorKind) -> bool:
    """True if *exc* was raised and classifies as *kind*."""
    return exc is not None and classify(exc) == kind


def _matches(patterns: list[re.Pattern[str]], message: str) -> bool:
    return any(p.search(message) for p in patterns)
