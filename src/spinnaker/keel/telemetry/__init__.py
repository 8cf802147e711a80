"""Resource check telemetry: registry adapters and the telemetry listener."""

from spinnaker.keel.telemetry.listener import (
    RESOURCE_CHECKED_COUNTER_ID,
    TelemetryListener,
    resource_checked_tags,
)
from spinnaker.keel.telemetry.registry import (
    Counter,
    InMemoryRegistry,
    NoopRegistry,
    OpenTelemetryRegistry,
    Registry,
    Tag,
)

__all__ = [
    "RESOURCE_CHECKED_COUNTER_ID",
    "TelemetryListener",
    "resource_checked_tags",
    "Counter",
    "InMemoryRegistry",
    "NoopRegistry",
    "OpenTelemetryRegistry",
    "Registry",
    "Tag",
]
