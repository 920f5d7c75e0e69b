"""Generic exception-kind discrimination for any operation."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from conformance_oracles.capabilities import capabilities_of
from conformance_oracles.oracles.base import expect_error, expect_return, inapplicable, oracle
from conformance_oracles.oracles.support import require_unchanged
from conformance_oracles.snapshot import Snapshot
from conformance_oracles.taxonomy import dominant
from conformance_oracles.types import Capability, ErrorKind, Operation

LOG = logging.getLogger("conformance_oracles.oracles.rejection")


@oracle("rejection")
def check_rejection(
    container: Any,
    operation: Operation,
    defects: Iterable[ErrorKind] = (),
    *,
    optional: bool = False,
) -> None:
    """
    The operation raises the dominant injected defect and changes nothing.

    Args:
        container: Subject the operation is applied to
        operation: The call to make
        defects: Every defect the harness injected into the call
        optional: The contract permits a normal return even with defects

    With no defects the operation must return normally. Orthogonal kinds
    (ownership, structural change, interruption) are not diagnosable from
    arguments alone and make the oracle inapplicable.
    """
    defects = set(defects)
    if any(k.orthogonal for k in defects):
        inapplicable("orthogonal defects %s", sorted(k.value for k in defects if k.orthogonal))

    snap = Snapshot.capture(container) if Capability.ITERABLE in capabilities_of(container) else None
    outcome = operation.apply(container)
    if not defects:
        expect_return(outcome)
        return

    expected = dominant(defects)
    LOG.debug("%s: expecting %s from defects %s", operation.describe(), expected, sorted(defects))
    expect_error(outcome, expected, optional=optional)
    if snap is not None and outcome.raised:
        require_unchanged(snap, container, operation.describe())
