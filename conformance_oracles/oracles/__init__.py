"""
Oracle catalog.

Importing this package registers every oracle family in ``REGISTRY``.
Each oracle is called as ``check_x(subject, *args)`` and returns a
Verdict; see ``conformance_oracles.catalog`` for discovery.

Families:
    collection, sequence, sets, mapping, views, ordering, arrays,
    equality, duplication, teardown, failfast, monitor, rejection, text
"""

from . import (
    arrays,
    collection,
    equality,
    failfast,
    mapping,
    monitor,
    ordering,
    rejection,
    sequence,
    sets,
    text,
    views,
)
from .base import REGISTRY, OracleSpec, check, expect_error, expect_return, fail, inapplicable, oracle

__all__ = [
    "REGISTRY",
    "OracleSpec",
    "arrays",
    "check",
    "collection",
    "equality",
    "expect_error",
    "expect_return",
    "fail",
    "failfast",
    "inapplicable",
    "mapping",
    "monitor",
    "oracle",
    "ordering",
    "rejection",
    "sequence",
    "sets",
    "text",
    "views",
]
