"""
conformance-oracles: contract oracles for container, value and monitor APIs.

Usage:
    from conformance_oracles import catalog, capabilities_of
    from conformance_oracles.adapters import build_adapter

    seq = build_adapter("sequence", [10, 20, 30])
    for spec in catalog.applicable(seq, family="sequence"):
        print(spec.name, spec.summary)

    report = catalog.evaluate("check_insert", seq, 1, 99)
    print(report.model_dump(mode="json"))
"""

from .cancellation import CancellationToken
from .capabilities import capabilities_of, has_capabilities
from .config import OracleConfig, configure_logging, default_config
from .errors import ContractError
from .snapshot import Snapshot
from .taxonomy import classify, dominant
from .types import Capability, ErrorKind, Operation, Outcome, Verdict
from . import catalog

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "Capability",
    "ContractError",
    "ErrorKind",
    "Operation",
    "OracleConfig",
    "Outcome",
    "Snapshot",
    "Verdict",
    "capabilities_of",
    "catalog",
    "classify",
    "configure_logging",
    "default_config",
    "dominant",
    "has_capabilities",
]
