"""Configuration for the oracle engine.

Loads timing bounds for the concurrency oracles and the log level from
environment variables with sensible defaults.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass
class OracleConfig:
    """Timeouts and tolerances used by the monitor and teardown oracles."""
    wait_timeout_s: float = 2.0  # upper bound for a wait expected to be woken
    rendezvous_timeout_s: float = 2.0  # auxiliary thread waiting for the primary to block
    join_timeout_s: float = 5.0
    poll_interval_s: float = 0.01
    timing_tolerance_s: float = 0.05  # timed wait may return this much early
    timing_slack_s: float = 0.5  # ... and this much late
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "OracleConfig":
        return cls(
            wait_timeout_s=float(os.getenv("ORACLE_WAIT_TIMEOUT_S", "2.0")),
            rendezvous_timeout_s=float(os.getenv("ORACLE_RENDEZVOUS_TIMEOUT_S", "2.0")),
            join_timeout_s=float(os.getenv("ORACLE_JOIN_TIMEOUT_S", "5.0")),
            poll_interval_s=float(os.getenv("ORACLE_POLL_INTERVAL_S", "0.01")),
            timing_tolerance_s=float(os.getenv("ORACLE_TIMING_TOLERANCE_S", "0.05")),
            timing_slack_s=float(os.getenv("ORACLE_TIMING_SLACK_S", "0.5")),
            log_level=os.getenv("ORACLE_LOG_LEVEL", "INFO"),
        )


_DEFAULT: OracleConfig | None = None


def default_config() -> OracleConfig:
    """Process-wide config, read from the environment on first use."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = OracleConfig.from_env()
    return _DEFAULT


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for a harness; the library itself never calls this."""
    level = level or os.getenv("ORACLE_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
