"""
Shared test fixtures and pytest configuration.

Markers:
    @pytest.mark.timing: spawns a thread and sleeps or waits on a monitor

Run only the fast tests:
    pytest -m "not timing"
"""

import pytest

from conformance_oracles.adapters import Monitor, build_adapter
from conformance_oracles.config import OracleConfig


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "timing: spawns an auxiliary thread or waits on a monitor")


@pytest.fixture
def fast_config():
    """Short bounds so failing monitor oracles give up quickly."""
    return OracleConfig(
        wait_timeout_s=1.0,
        rendezvous_timeout_s=1.0,
        join_timeout_s=2.0,
        poll_interval_s=0.005,
        timing_tolerance_s=0.05,
        timing_slack_s=0.5,
    )


@pytest.fixture
def seq():
    return build_adapter("sequence", [10, 20, 30])


@pytest.fixture
def read_only_seq():
    return build_adapter("sequence", [10, 20, 30], read_only=True)


@pytest.fixture
def int_set():
    return build_adapter("set", [1, 2, 3])


@pytest.fixture
def str_map():
    return build_adapter("map", {"a": 1, "b": 2})


@pytest.fixture
def monitor():
    return Monitor(poll_interval_s=0.005)
