"""Resource lifecycle events and the in-process event bus."""

from spinnaker.keel.events.bus import EventBus, EventHandler, get_event_bus, reset_event_bus
from spinnaker.keel.events.kinds import ResourceKind, parse_kind
from spinnaker.keel.events.models import (
    ResourceCheckError,
    ResourceCheckResult,
    ResourceDeltaDetected,
    ResourceInvalid,
    ResourceMissing,
    ResourceState,
    ResourceValid,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    "ResourceKind",
    "parse_kind",
    "ResourceCheckError",
    "ResourceCheckResult",
    "ResourceDeltaDetected",
    "ResourceInvalid",
    "ResourceMissing",
    "ResourceState",
    "ResourceValid",
]
