"""
Oracle discovery and reporting.

The harness asks ``applicable(subject)`` which oracles the subject's
capabilities admit, runs them through ``evaluate`` and logs or serialises
the resulting ``OracleReport`` with ``model_dump(mode="json")``.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel

from conformance_oracles.capabilities import capabilities_of, describe
from conformance_oracles.oracles import REGISTRY, OracleSpec
from conformance_oracles.types import Verdict

LOG = logging.getLogger("conformance_oracles.catalog")


class OracleReport(BaseModel):
    oracle: str
    family: str
    verdict: Verdict
    elapsedMs: float
    subjectType: str
    capabilities: List[str]
    timestamp: datetime
    note: Optional[str] = None


def get(name: Union[str, OracleSpec, Callable[..., Any]]) -> OracleSpec:
    """
    Look up an oracle by name, by its spec or by the decorated function.

    Raises:
        ValueError: Unknown oracle
    """
    if isinstance(name, OracleSpec):
        return name
    spec = getattr(name, "spec", None)
    if isinstance(spec, OracleSpec):
        return spec
    if isinstance(name, str) and name in REGISTRY:
        return REGISTRY[name]
    raise ValueError(f"Unknown oracle: {name!r}. See catalog.families() for what is registered")


def families() -> dict[str, list[str]]:
    """Registered oracle names grouped by family."""
    grouped: dict[str, list[str]] = {}
    for spec in REGISTRY.values():
        grouped.setdefault(spec.family, []).append(spec.name)
    return {family: sorted(names) for family, names in sorted(grouped.items())}


def applicable(subject: Any, family: Optional[str] = None) -> list[OracleSpec]:
    """Oracles whose required capabilities *subject* has, optionally within one family."""
    caps = capabilities_of(subject)
    specs = [
        spec
        for spec in REGISTRY.values()
        if spec.applies_to(caps) and (family is None or spec.family == family)
    ]
    return sorted(specs, key=lambda s: (s.family, s.name))


def evaluate(oracle: Union[str, OracleSpec, Callable[..., Any]], subject: Any, *args: Any, **kwargs: Any) -> OracleReport:
    """Run one oracle and wrap its verdict in a report."""
    spec = get(oracle)
    start = time.perf_counter()
    verdict = spec.func(subject, *args, **kwargs)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    LOG.info("%s on %s: %s (%.1f ms)", spec.name, type(subject).__name__, verdict, elapsed_ms)
    return OracleReport(
        oracle=spec.name,
        family=spec.family,
        verdict=verdict,
        elapsedMs=round(elapsed_ms, 3),
        subjectType=type(subject).__name__,
        capabilities=describe(subject),
        timestamp=datetime.now(timezone.utc),
        note=spec.summary or None,
    )


def is_deterministic(
    oracle: Union[str, Callable[..., Any]],
    make_inputs: Callable[[], tuple[Any, ...]],
) -> bool:
    """
    Evaluate *oracle* twice on identical fresh inputs and compare verdicts.

    *make_inputs* builds the subject and arguments anew for each run so a
    mutating oracle cannot see its own earlier effects.
    """
    spec = get(oracle)
    first = spec.func(*make_inputs())
    second = spec.func(*make_inputs())
    if first != second:
        LOG.warning("%s is not deterministic: %s then %s", spec.name, first, second)
    return first == second
