"""Wire the telemetry listener into the event bus."""

from datetime import UTC, datetime

import structlog

from spinnaker.keel.events.bus import EventBus, get_event_bus
from spinnaker.keel.events.models import ResourceCheckResult
from spinnaker.keel.logging import setup_logging
from spinnaker.keel.settings import Settings, get_settings
from spinnaker.keel.telemetry.listener import Clock, TelemetryListener
from spinnaker.keel.telemetry.otel import create_registry
from spinnaker.keel.telemetry.registry import Registry

logger = structlog.get_logger(__name__)

# Listener created for this process and the bus it is subscribed to
_subscription: tuple[TelemetryListener, EventBus] | None = None


def utc_now() -> datetime:
    return datetime.now(UTC)


def create_telemetry_listener(
    bus: EventBus | None = None,
    registry: Registry | None = None,
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> TelemetryListener:
    """
    Create a telemetry listener and subscribe it to resource check events.

    Runs once per process. Later calls return the existing listener without
    subscribing again or building another MeterProvider, so events are never
    counted twice. Call reset_telemetry_listener() first to rewire.

    Args:
        bus: Event bus to subscribe to, defaults to the global bus
        registry: Metrics registry, built from settings when omitted
        clock: Clock for the listener, defaults to UTC wall clock
        settings: Settings, defaults to global settings

    Returns:
        The subscribed listener
    """
    global _subscription
    if _subscription is not None:
        logger.warning("Telemetry listener already created, reusing it")
        return _subscription[0]

    settings = settings or get_settings()
    setup_logging(settings)

    bus = bus or get_event_bus()
    listener = TelemetryListener(registry or create_registry(settings), clock or utc_now)
    listener.subscribe(bus)
    _subscription = (listener, bus)

    logger.info(
        "Telemetry listener subscribed",
        registry=type(listener.registry).__name__,
        metrics_enabled=settings.observability.enable_metrics,
    )
    return listener


def reset_telemetry_listener() -> None:
    """Unsubscribe the process listener (mainly for testing)."""
    global _subscription
    if _subscription is not None:
        listener, bus = _subscription
        bus.unsubscribe(ResourceCheckResult, listener.on_resource_checked)
    _subscription = None
