"""
Core data models for the oracle engine.

Uses dataclasses for the values that travel between the harness and the
oracles; the enumerations are StrEnums so verdicts and error kinds
serialize to plain strings in harness logs.

Decision: D-002
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Mapping

LOG = logging.getLogger("conformance_oracles.types")


class Verdict(StrEnum):
    """Outcome of a single oracle invocation."""

    PASS = "pass"
    FAIL = "fail"
    INAPPLICABLE = "inapplicable"

    @classmethod
    def of(cls, condition: bool) -> "Verdict":
        return cls.PASS if condition else cls.FAIL


class ErrorKind(StrEnum):
    """Closed classification of errors raised by a container under test."""

    TYPE_MISMATCH = "type_mismatch"
    NULL_NOT_PERMITTED = "null_not_permitted"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    UNSUPPORTED_MUTATION = "unsupported_mutation"
    ILLEGAL_ARGUMENT = "illegal_argument"
    CONCURRENT_STRUCTURAL_CHANGE = "concurrent_structural_change"
    MONITOR_NOT_OWNED = "monitor_not_owned"
    INTERRUPTED_WAIT = "interrupted_wait"

    @property
    def orthogonal(self) -> bool:
        """True for the time/ownership kinds that never enter the priority chain."""
        return self in _ORTHOGONAL_KINDS

    @property
    def priority(self) -> int:
        """Rank in the diagnosis chain (0 is the most specific); -1 if orthogonal."""
        try:
            return PRIORITY_CHAIN.index(self)
        except ValueError:
            return -1


# Input-shape defects are diagnosed before argument values, and those before
# operation support.
PRIORITY_CHAIN: tuple[ErrorKind, ...] = (
    ErrorKind.NULL_NOT_PERMITTED,
    ErrorKind.TYPE_MISMATCH,
    ErrorKind.ILLEGAL_ARGUMENT,
    ErrorKind.INDEX_OUT_OF_RANGE,
    ErrorKind.UNSUPPORTED_MUTATION,
)

_ORTHOGONAL_KINDS = frozenset(
    {
        ErrorKind.CONCURRENT_STRUCTURAL_CHANGE,
        ErrorKind.MONITOR_NOT_OWNED,
        ErrorKind.INTERRUPTED_WAIT,
    }
)


class Capability(StrEnum):
    """Named operation groups a subject may expose."""

    SIZED = "sized"
    ITERABLE = "iterable"
    MEMBERSHIP = "membership"
    MUTABLE = "mutable"
    SEQUENCE = "sequence"
    SET_LIKE = "set_like"
    ASSOCIATIVE = "associative"
    ORDERED = "ordered"
    ARRAY = "array"
    LIST_ITERATOR = "list_iterator"
    SUB_RANGE = "sub_range"
    MONITOR = "monitor"
    INTERRUPTIBLE = "interruptible"
    DUPLICABLE = "duplicable"
    TEARDOWN = "teardown"
    HASHABLE = "hashable"
    TEXT = "text"


@dataclass(frozen=True)
class Outcome:
    """What an operation did: a returned value or a raised error."""

    value: Any = None
    error: Exception | None = None

    @property
    def raised(self) -> bool:
        return self.error is not None

    @property
    def kind(self) -> ErrorKind | None:
        """Classified kind of the raised error, or None for a normal return."""
        if self.error is None:
            return None
        from conformance_oracles.taxonomy import classify

        return classify(self.error)

    @classmethod
    def capture(cls, func: Callable[..., Any], *args: Any, **kwargs: Any) -> "Outcome":
        """Invoke *func* and record either its return value or its exception."""
        try:
            return cls(value=func(*args, **kwargs))
        except Exception as exc:
            LOG.debug("Captured %s from %s: %s", type(exc).__name__, _callable_name(func), exc)
            return cls(error=exc)

    def describe(self) -> str:
        if self.error is None:
            return f"returned {self.value!r}"
        return f"raised {type(self.error).__name__} ({self.kind or 'unclassified'}): {self.error}"


@dataclass(frozen=True)
class Operation:
    """A named container operation with its ordered arguments.

    Supplied by the harness; the engine only applies it.
    """

    name: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    def apply(self, target: Any) -> Outcome:
        """Invoke the operation on *target*; a missing method is recorded as an error."""
        try:
            method = getattr(target, self.name)
        except AttributeError as exc:
            return Outcome(error=exc)
        return Outcome.capture(method, *self.args, **dict(self.kwargs))

    def describe(self) -> str:
        parts = [repr(a) for a in self.args]
        parts.extend(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"{self.name}({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "args": list(self.args),
            "kwargs": dict(self.kwargs),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Operation":
        return cls(
            name=d["name"],
            args=tuple(d.get("args", ())),
            kwargs=dict(d.get("kwargs", {})),
        )


def _callable_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)
