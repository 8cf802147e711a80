"""
OpenTelemetry metrics setup.

Configures the OTLP metric exporter and builds the Registry the telemetry
listener records into.
"""

import structlog
from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)

from spinnaker.keel.settings import Settings, get_settings
from spinnaker.keel.telemetry.registry import NoopRegistry, OpenTelemetryRegistry, Registry

logger = structlog.get_logger(__name__)

METER_NAME = "spinnaker.keel"


def create_resource(settings: Settings | None = None) -> Resource:
    """Create OpenTelemetry resource with service information."""
    settings = settings or get_settings()
    resource_attributes = {
        SERVICE_NAME: settings.observability.otel_service_name,
        SERVICE_VERSION: settings.app_version,
        DEPLOYMENT_ENVIRONMENT: settings.environment.value,
    }

    # Add custom resource attributes from settings
    if settings.observability.otel_resource_attributes:
        resource_attributes.update(settings.observability.otel_resource_attributes)

    return Resource.create(resource_attributes)


def setup_metrics(resource: Resource, settings: Settings | None = None) -> MeterProvider:
    """
    Configure an OpenTelemetry MeterProvider with an OTLP exporter.

    Without a configured endpoint the provider records but never exports.

    Args:
        resource: Resource describing this service
        settings: Settings to read exporter configuration from

    Returns:
        The configured MeterProvider
    """
    settings = settings or get_settings()
    observability = settings.observability

    if not observability.otel_endpoint:
        logger.warning("OpenTelemetry metrics enabled but no endpoint configured")
        return MeterProvider(resource=resource)

    # For HTTP exporters, add the protocol-specific path
    endpoint = observability.otel_endpoint.rstrip("/")
    if not endpoint.endswith("/v1/metrics"):
        endpoint = f"{endpoint}/v1/metrics"

    try:
        metric_exporter = OTLPMetricExporter(
            endpoint=endpoint,
            timeout=observability.metrics_export_timeout_millis / 1000,
        )
        metric_reader = PeriodicExportingMetricReader(
            exporter=metric_exporter,
            export_interval_millis=observability.metrics_export_interval_millis,
            export_timeout_millis=observability.metrics_export_timeout_millis,
        )
    except Exception as e:
        logger.error("Failed to setup OpenTelemetry metrics", error=str(e), exc_info=True)
        return MeterProvider(resource=resource)

    logger.info("OpenTelemetry metrics configured", endpoint=endpoint)
    return MeterProvider(resource=resource, metric_readers=[metric_reader])


def get_meter(name: str, version: str | None = None) -> metrics.Meter:
    """
    Get a meter for the given component name from the global provider.

    Args:
        name: Component/module name
        version: Optional component version

    Returns:
        OpenTelemetry Meter instance
    """
    return metrics.get_meter(name, version or "")


def create_registry(settings: Settings | None = None) -> Registry:
    """
    Build the metrics registry described by settings.

    Returns a NoopRegistry when metrics are disabled. Otherwise a
    MeterProvider is configured, installed globally, and wrapped in an
    OpenTelemetryRegistry.
    """
    settings = settings or get_settings()

    if not settings.observability.enable_metrics:
        logger.debug("Metrics disabled by configuration")
        return NoopRegistry()

    meter_provider = setup_metrics(create_resource(settings), settings)
    metrics.set_meter_provider(meter_provider)
    meter = meter_provider.get_meter(METER_NAME, settings.app_version)
    return OpenTelemetryRegistry(meter)
