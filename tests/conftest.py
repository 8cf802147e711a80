"""
Global pytest configuration and fixtures for Keel telemetry tests.
"""

from datetime import UTC, datetime

import pytest
import structlog

from spinnaker.keel.bootstrap import reset_telemetry_listener
from spinnaker.keel.events import ResourceValid, parse_kind, reset_event_bus
from spinnaker.keel.settings import reset_settings

FIXED_NOW = datetime(2019, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _reset_globals():
    """Reset singletons and structlog configuration around every test."""
    reset_settings()
    reset_telemetry_listener()
    reset_event_bus()
    structlog.reset_defaults()
    yield
    reset_settings()
    reset_telemetry_listener()
    reset_event_bus()
    structlog.reset_defaults()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def resource_valid() -> ResourceValid:
    return ResourceValid(
        kind=parse_kind("ec2/cluster@v1"),
        id="ec2:cluster:prod:keel-main",
        version=1,
        application="fnord",
        timestamp=FIXED_NOW,
    )
