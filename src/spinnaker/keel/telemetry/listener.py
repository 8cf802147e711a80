"""
Telemetry listener for resource check events.

Every resource check result becomes one increment of the
``keel.resource.checked`` counter. Recording is best-effort: registry
failures are logged and never reach the code that published the event.
"""

from collections.abc import Callable
from datetime import datetime

import structlog

from spinnaker.keel.events.bus import EventBus
from spinnaker.keel.events.models import ResourceCheckResult
from spinnaker.keel.telemetry.registry import Registry, Tag

logger = structlog.get_logger(__name__)

# Metric name and tag keys are relied on by dashboards and alerts.
RESOURCE_CHECKED_COUNTER_ID = "keel.resource.checked"
RESOURCE_KIND_TAG = "resourceKind"
RESOURCE_ID_TAG = "resourceId"
RESOURCE_APPLICATION_TAG = "resourceApplication"
RESOURCE_STATE_TAG = "resourceState"

Clock = Callable[[], datetime]


def resource_checked_tags(event: ResourceCheckResult) -> tuple[Tag, ...]:
    """Build the tag set for a resource check event."""
    return (
        Tag(RESOURCE_KIND_TAG, str(event.kind)),
        Tag(RESOURCE_ID_TAG, event.id),
        Tag(RESOURCE_APPLICATION_TAG, event.application),
        Tag(RESOURCE_STATE_TAG, event.state.name),
    )


class TelemetryListener:
    """Records resource check events as counter increments."""

    def __init__(self, registry: Registry, clock: Clock) -> None:
        self.registry = registry
        # Not used when incrementing; kept for latency measurements.
        self.clock = clock

    def subscribe(self, bus: EventBus) -> None:
        """Receive every resource check event published on the bus."""
        bus.subscribe(ResourceCheckResult, self.on_resource_checked)

    def on_resource_checked(self, event: ResourceCheckResult) -> None:
        try:
            self.registry.counter(
                RESOURCE_CHECKED_COUNTER_ID, resource_checked_tags(event)
            ).increment()
        except Exception as e:
            logger.error(
                "Exception incrementing counter",
                metric_name=RESOURCE_CHECKED_COUNTER_ID,
                error=str(e),
                error_type=type(e).__name__,
            )
