"""
Oracle registration and the verdict boundary.

Every oracle is a plain function decorated with ``@oracle(family,
*requires)``. The decorator turns it into an error-absorbing predicate:

- a subject lacking a required capability yields ``inapplicable``;
- the body reports a violated contract by calling ``fail()`` (or
  ``check()``), which yields ``fail``;
- the body may call ``inapplicable()`` when a precondition it can only
  discover at run time does not hold;
- any other exception escaping the body is an unanticipated error and
  yields ``fail``;
- a normal return yields ``pass`` (or the returned Verdict/bool).

Only a Verdict ever crosses the boundary.

Decision: D-006
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, NoReturn

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.types import Capability, ErrorKind, Outcome, Verdict

LOG = logging.getLogger("conformance_oracles.oracles")


class OracleFailure(Exception):
    """Raised inside an oracle body when the contract is violated."""


class OracleInapplicable(Exception):
    """Raised inside an oracle body when the contract does not constrain the subject."""


@dataclass(frozen=True)
class OracleSpec:
    """Catalog entry for one oracle."""

    name: str
    family: str
    requires: frozenset[Capability]
    func: Callable[..., Verdict]
    summary: str = ""

    def applies_to(self, capabilities: frozenset[Capability]) -> bool:
        return self.requires <= capabilities

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "family": self.family,
            "requires": sorted(c.value for c in self.requires),
            "summary": self.summary,
        }


REGISTRY: dict[str, OracleSpec] = {}


def fail(reason: str, *args: Any) -> NoReturn:
    raise OracleFailure(reason % args if args else reason)


def check(condition: Any, reason: str, *args: Any) -> None:
    """Fail with *reason* unless *condition* holds."""
    if not condition:
        fail(reason, *args)


def inapplicable(reason: str, *args: Any) -> NoReturn:
    raise OracleInapplicable(reason % args if args else reason)


def expect_error(outcome: Outcome, kind: ErrorKind, *, optional: bool = False) -> None:
    """
    Require *outcome* to be a raise of *kind*.

    Any other kind fails, and so does a normal return unless the contract
    makes raising optional.
    """
    if not outcome.raised:
        if optional:
            return
        fail("expected %s but the operation %s", kind, outcome.describe())
    if outcome.kind != kind:
        fail("expected %s but the operation %s", kind, outcome.describe())


def expect_return(outcome: Outcome) -> Any:
    """Require a normal return and hand back its value."""
    if outcome.raised:
        fail("unexpected error: %s", outcome.describe())
    return outcome.value


def oracle(family: str, *requires: Capability) -> Callable[[Callable[..., Any]], Callable[..., Verdict]]:
    """
    Register an oracle function.

    Args:
        family: Catalog family, e.g. "sequence" or "monitor"
        *requires: Capabilities the first argument must have

    Returns:
        Decorator producing the error-absorbing, registered oracle
    """
    required = frozenset(requires)

    def decorator(func: Callable[..., Any]) -> Callable[..., Verdict]:
        name = func.__name__

        @functools.wraps(func)
        def wrapper(subject: Any, *args: Any, **kwargs: Any) -> Verdict:
            missing = required - capabilities_of(subject)
            if missing:
                LOG.debug(
                    "%s inapplicable to %s: missing %s",
                    name,
                    type(subject).__name__,
                    sorted(c.value for c in missing),
                )
                return Verdict.INAPPLICABLE
            try:
                result = func(subject, *args, **kwargs)
                if result is None:
                    return Verdict.PASS
                if isinstance(result, Verdict):
                    return result
                return Verdict.of(bool(result))
            except OracleFailure as exc:
                LOG.debug("%s failed on %s: %s", name, type(subject).__name__, exc)
                return Verdict.FAIL
            except OracleInapplicable as exc:
                LOG.debug("%s inapplicable to %s: %s", name, type(subject).__name__, exc)
                return Verdict.INAPPLICABLE
            except Exception as exc:
                LOG.warning(
                    "%s: unanticipated %s from %s: %s",
                    name,
                    type(exc).__name__,
                    type(subject).__name__,
                    exc,
                )
                return Verdict.FAIL

        summary = (func.__doc__ or "").strip().splitlines()[0] if func.__doc__ else ""
        spec = OracleSpec(name=name, family=family, requires=required, func=wrapper, summary=summary)
        if name in REGISTRY:
            raise ValueError(f"Duplicate oracle name: {name!r}")
        REGISTRY[name] = spec
        wrapper.spec = spec  # type: ignore[attr-defined]
        return wrapper

    return decorator
