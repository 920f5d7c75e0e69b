"""
Capability model: which operation groups a subject exposes.

Classification is pure and never raises. A subject may declare its
capabilities explicitly through ``__capabilities__`` (authoritative) and
may mark itself read-only with ``read_only = True``; otherwise
capabilities are inferred by duck typing over the contract API. Anything
that cannot be inferred is simply absent, which turns the corresponding
oracles into ``inapplicable`` rather than ``fail``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from conformance_oracles.types import Capability

LOG = logging.getLogger("conformance_oracles.capabilities")

_MUTATORS = ("add", "put", "set", "insert", "remove", "remove_at", "clear")
_MONITOR_METHODS = ("acquire", "release", "wait", "notify", "notify_all")
_TEXT_METHODS = ("find", "rfind", "startswith", "endswith", "split", "join", "replace", "encode")


def capabilities_of(subject: Any) -> frozenset[Capability]:
    """
    Report the capability set of *subject*.

    Args:
        subject: Any object; containers under test, monitors and plain values

    Returns:
        Frozen set of Capability members, possibly empty
    """
    try:
        declared = getattr(subject, "__capabilities__", None)
        if declared is not None:
            caps = _coerce(declared)
        else:
            caps = _infer(subject)
        if _truthy_attr(subject, "read_only"):
            caps.discard(Capability.MUTABLE)
        return frozenset(caps)
    except Exception as exc:  # classification must never fail
        LOG.warning("Capability inference failed for %s: %s", type(subject).__name__, exc)
        return frozenset()


def has_capabilities(subject: Any, *required: Capability) -> bool:
    return set(required) <= capabilities_of(subject)


def describe(subject: Any) -> list[str]:
    """Sorted capability names, for log lines and reports."""
    return sorted(c.value for c in capabilities_of(subject))


def _infer(subject: Any) -> set[Capability]:
    caps: set[Capability] = set()
    if subject is None:
        return caps

    if isinstance(subject, str):
        # Text values are immutable sequences of code points, not containers
        caps.update({Capability.TEXT, Capability.SIZED, Capability.ITERABLE, Capability.HASHABLE})
        return caps

    if _callable(subject, "size"):
        caps.add(Capability.SIZED)
    if _callable(subject, "__iter__"):
        caps.add(Capability.ITERABLE)
    if _callable(subject, "contains") or _callable(subject, "contains_key"):
        caps.add(Capability.MEMBERSHIP)

    is_assoc = _callable(subject, "contains_key") and _callable(subject, "get")
    is_seq = not is_assoc and _callable(subject, "get") and _callable(subject, "index_of")
    is_set = (
        not is_assoc
        and not is_seq
        and _callable(subject, "contains")
        and _callable(subject, "contains_all")
    )
    if is_assoc:
        caps.add(Capability.ASSOCIATIVE)
    if is_seq:
        caps.update({Capability.SEQUENCE, Capability.ORDERED})
    if is_set:
        caps.add(Capability.SET_LIKE)
    if (is_assoc or is_set) and _truthy_attr(subject, "ordered"):
        caps.add(Capability.ORDERED)

    if (is_assoc or is_seq or is_set) and any(_callable(subject, m) for m in _MUTATORS):
        caps.add(Capability.MUTABLE)

    if _callable(subject, "to_array"):
        caps.add(Capability.ARRAY)
    if _callable(subject, "list_iterator"):
        caps.add(Capability.LIST_ITERATOR)
    if _callable(subject, "sub_list"):
        caps.add(Capability.SUB_RANGE)

    if all(_callable(subject, m) for m in _MONITOR_METHODS):
        caps.add(Capability.MONITOR)
        if _accepts_keyword(subject.wait, "token"):
            caps.add(Capability.INTERRUPTIBLE)

    if _callable(subject, "copy") or _callable(subject, "__copy__"):
        caps.add(Capability.DUPLICABLE)
    if _callable(subject, "close"):
        caps.add(Capability.TEARDOWN)
    if _callable(subject, "hash_code") or getattr(type(subject), "__hash__", None) is not None:
        caps.add(Capability.HASHABLE)

    if all(_callable(subject, m) for m in _TEXT_METHODS) and _callable(subject, "__len__"):
        caps.add(Capability.TEXT)

    return caps


def _coerce(declared: Any) -> set[Capability]:
    caps: set[Capability] = set()
    for item in declared:
        try:
            caps.add(Capability(item))
        except ValueError:
            LOG.debug("Ignoring unknown declared capability %r", item)
    return caps


def _callable(subject: Any, name: str) -> bool:
    return callable(getattr(subject, name, None))


def _truthy_attr(subject: Any, name: str) -> bool:
    value = getattr(subject, name, False)
    if callable(value):
        return False
    return bool(value)


def _accepts_keyword(func: Any, name: str) -> bool:
    try:
        params = inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False
    return name in params or any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())
