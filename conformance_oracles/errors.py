"""
Exception hierarchy for contract violations raised by containers.

Each class derives from the built-in exception a Python caller would
expect for the same situation, so code that catches ``TypeError`` or
``IndexError`` keeps working, and carries the ``ErrorKind`` the taxonomy
matcher reports for it.
"""

from __future__ import annotations

from typing import ClassVar

from conformance_oracles.types import ErrorKind


class ContractError(Exception):
    """Base class for errors that carry an explicit ErrorKind."""

    kind: ClassVar[ErrorKind]


class NullNotPermittedError(ContractError, TypeError):
    kind = ErrorKind.NULL_NOT_PERMITTED


class TypeMismatchError(ContractError, TypeError):
    kind = ErrorKind.TYPE_MISMATCH


class IllegalArgumentError(ContractError, ValueError):
    kind = ErrorKind.ILLEGAL_ARGUMENT


class IndexOutOfRangeError(ContractError, IndexError):
    kind = ErrorKind.INDEX_OUT_OF_RANGE


class UnsupportedMutationError(ContractError, NotImplementedError):
    kind = ErrorKind.UNSUPPORTED_MUTATION


class ConcurrentModificationError(ContractError, RuntimeError):
    kind = ErrorKind.CONCURRENT_STRUCTURAL_CHANGE


class MonitorNotOwnedError(ContractError, RuntimeError):
    kind = ErrorKind.MONITOR_NOT_OWNED


class InterruptedWaitError(ContractError, RuntimeError):
    kind = ErrorKind.INTERRUPTED_WAIT


class IllegalStateError(ContractError, RuntimeError):
    """Iterator misuse (e.g. ``remove()`` twice); reported as an illegal argument."""

    kind = ErrorKind.ILLEGAL_ARGUMENT


ERROR_CLASSES: dict[ErrorKind, type[ContractError]] = {
    ErrorKind.NULL_NOT_PERMITTED: NullNotPermittedError,
    ErrorKind.TYPE_MISMATCH: TypeMismatchError,
    ErrorKind.ILLEGAL_ARGUMENT: IllegalArgumentError,
    ErrorKind.INDEX_OUT_OF_RANGE: IndexOutOfRangeError,
    ErrorKind.UNSUPPORTED_MUTATION: UnsupportedMutationError,
    ErrorKind.CONCURRENT_STRUCTURAL_CHANGE: ConcurrentModificationError,
    ErrorKind.MONITOR_NOT_OWNED: MonitorNotOwnedError,
    ErrorKind.INTERRUPTED_WAIT: InterruptedWaitError,
}
