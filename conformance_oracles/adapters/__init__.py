"""
Reference implementations of the container contract API.

Follows the ABC + factory pattern used across the package:
``build_adapter`` creates an adapter of a named shape and ``adapt`` picks
one for a built-in container.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import Any

from conformance_oracles.adapters.base import AbstractCollection, ElementPolicy, FailFastIterator
from conformance_oracles.adapters.mapping import MapAdapter
from conformance_oracles.adapters.monitor import Monitor
from conformance_oracles.adapters.sequence import ListIterator, SequenceAdapter, SubList
from conformance_oracles.adapters.sets import SetAdapter

LOG = logging.getLogger("conformance_oracles.adapters")

__all__ = [
    "AbstractCollection",
    "ElementPolicy",
    "FailFastIterator",
    "ListIterator",
    "MapAdapter",
    "Monitor",
    "SequenceAdapter",
    "SetAdapter",
    "SubList",
    "adapt",
    "build_adapter",
]


def build_adapter(shape: str, items: Any = None, **kwargs: Any) -> Any:
    """
    Factory: create a reference adapter of the requested shape.

    Args:
        shape: "sequence", "set", "map" or "monitor"
        items: Initial contents (ignored for monitors)
        **kwargs: ElementPolicy fields, ``ordered`` for sets and maps,
            ``poll_interval_s`` for monitors

    Returns:
        Adapter instance

    Raises:
        ValueError: Unknown shape
    """
    if shape == "sequence":
        return SequenceAdapter(items or (), **kwargs)

    elif shape == "set":
        return SetAdapter(items or (), **kwargs)

    elif shape == "map":
        return MapAdapter(items, **kwargs)

    elif shape == "monitor":
        return Monitor(**kwargs)

    else:
        raise ValueError(
            f"Unknown adapter shape: {shape!r}. Supported: 'sequence', 'set', 'map', 'monitor'"
        )


def adapt(container: Any, **kwargs: Any) -> Any:
    """Wrap a built-in container in the matching adapter; immutable built-ins become read-only."""
    if isinstance(container, (MappingProxyType,)):
        return build_adapter("map", dict(container), read_only=True, **kwargs)
    if isinstance(container, Mapping):
        return build_adapter("map", container, **kwargs)
    if isinstance(container, frozenset):
        return build_adapter("set", container, read_only=True, **kwargs)
    if isinstance(container, Set):
        return build_adapter("set", container, **kwargs)
    if isinstance(container, tuple):
        return build_adapter("sequence", container, read_only=True, **kwargs)
    if isinstance(container, list):
        return build_adapter("sequence", container, **kwargs)
    raise ValueError(f"No adapter for {type(container).__name__}")
