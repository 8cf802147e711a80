"""Tests for TelemetryListener.on_resource_checked."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, Mock

import pytest
from structlog.testing import capture_logs

from spinnaker.keel.events import (
    EventBus,
    ResourceCheckError,
    ResourceDeltaDetected,
    ResourceMissing,
    parse_kind,
)
from spinnaker.keel.exceptions import RegistryError
from spinnaker.keel.telemetry import (
    RESOURCE_CHECKED_COUNTER_ID,
    Counter,
    InMemoryRegistry,
    Registry,
    Tag,
    TelemetryListener,
    resource_checked_tags,
)

FIXED_NOW = datetime(2019, 6, 1, 12, 0, tzinfo=UTC)


class RecordingCounter(Counter):
    def __init__(self, error: Exception | None = None) -> None:
        self.increments = 0
        self.error = error

    def increment(self, amount: int = 1) -> None:
        if self.error is not None:
            raise self.error
        self.increments += amount


class RecordingRegistry(Registry):
    """Registry fake that records every counter request."""

    def __init__(self, counter: RecordingCounter | None = None, error: Exception | None = None):
        self.counter_calls: list[tuple[str, tuple[Tag, ...]]] = []
        self.handle = counter or RecordingCounter()
        self.error = error

    def counter(self, name, tags=()):
        self.counter_calls.append((name, tuple(tags)))
        if self.error is not None:
            raise self.error
        return self.handle


@pytest.mark.unit
class TestSuccessfulMetricSubmission:
    """Successful metric submission."""

    def test_increments_counter(self, resource_valid, fixed_clock):
        registry = RecordingRegistry()
        listener = TelemetryListener(registry, fixed_clock)

        listener.on_resource_checked(resource_valid)

        assert registry.handle.increments == 1

    def test_counter_name(self, resource_valid, fixed_clock):
        registry = RecordingRegistry()

        TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        assert len(registry.counter_calls) == 1
        name, _ = registry.counter_calls[0]
        assert name == "keel.resource.checked"
        assert name == RESOURCE_CHECKED_COUNTER_ID

    def test_tags_the_counter(self, resource_valid, fixed_clock):
        registry = RecordingRegistry()

        TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        _, tags = registry.counter_calls[0]
        assert len(tags) == 4
        assert sorted(tags) == sorted(
            [
                Tag("resourceKind", "ec2/cluster@v1"),
                Tag("resourceId", "ec2:cluster:prod:keel-main"),
                Tag("resourceApplication", "fnord"),
                Tag("resourceState", "VALID"),
            ]
        )

    def test_tag_helper_order(self, resource_valid):
        assert resource_checked_tags(resource_valid) == (
            Tag("resourceKind", "ec2/cluster@v1"),
            Tag("resourceId", "ec2:cluster:prod:keel-main"),
            Tag("resourceApplication", "fnord"),
            Tag("resourceState", "VALID"),
        )

    def test_mock_registry_receives_one_call(self, resource_valid, fixed_clock):
        counter = Mock(spec=Counter)
        registry = Mock(spec=Registry)
        registry.counter.return_value = counter

        TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        registry.counter.assert_called_once_with(
            "keel.resource.checked", resource_checked_tags(resource_valid)
        )
        counter.increment.assert_called_once_with()

    def test_each_event_is_submitted_independently(self, fixed_clock):
        registry = InMemoryRegistry()
        listener = TelemetryListener(registry, fixed_clock)
        events = [
            ResourceDeltaDetected(
                kind=parse_kind("ec2/cluster@v1"),
                id="ec2:cluster:prod:keel-main",
                version=2,
                application="fnord",
                timestamp=FIXED_NOW,
            ),
            ResourceMissing(
                kind=parse_kind("ec2/security-group@v1"),
                id="ec2:securityGroup:test:fnord",
                version=1,
                application="fnord",
                timestamp=FIXED_NOW,
            ),
            ResourceDeltaDetected(
                kind=parse_kind("ec2/cluster@v1"),
                id="ec2:cluster:prod:keel-main",
                version=3,
                application="fnord",
                timestamp=FIXED_NOW,
            ),
        ]

        for event in events:
            listener.on_resource_checked(event)

        counts = {
            dict(tags)["resourceState"] + ":" + dict(tags)["resourceId"]: count
            for (_, tags), count in registry.counters().items()
        }
        assert counts == {
            "DIFF:ec2:cluster:prod:keel-main": 2,
            "MISSING:ec2:securityGroup:test:fnord": 1,
        }

    def test_error_state_tag(self, fixed_clock):
        registry = RecordingRegistry()
        event = ResourceCheckError(
            kind=parse_kind("titus/cluster@v1"),
            id="titus:cluster:test:fnord",
            version=4,
            application="fnord",
            timestamp=FIXED_NOW,
            reason="cloud driver timed out",
        )

        TelemetryListener(registry, fixed_clock).on_resource_checked(event)

        _, tags = registry.counter_calls[0]
        assert dict(tags)["resourceState"] == "ERROR"
        assert dict(tags)["resourceKind"] == "titus/cluster@v1"

    def test_does_not_mutate_event(self, resource_valid, fixed_clock):
        before = repr(resource_valid)

        TelemetryListener(RecordingRegistry(), fixed_clock).on_resource_checked(resource_valid)

        assert repr(resource_valid) == before

    def test_construction_accepts_clock(self, fixed_clock):
        listener = TelemetryListener(RecordingRegistry(), fixed_clock)

        assert listener.clock() == FIXED_NOW


@pytest.mark.unit
class TestMetricSubmissionFails:
    """Registry failures never reach the caller."""

    def test_does_not_propagate_increment_exception(self, resource_valid, fixed_clock):
        registry = RecordingRegistry(
            counter=RecordingCounter(error=RuntimeError("Somebody set up us the bomb"))
        )
        listener = TelemetryListener(registry, fixed_clock)

        assert listener.on_resource_checked(resource_valid) is None
        assert len(registry.counter_calls) == 1

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("Somebody set up us the bomb"),
            ValueError("bad tag value"),
            ConnectionError("backend unreachable"),
            RegistryError("rejected", metric_name="keel.resource.checked"),
        ],
    )
    def test_does_not_propagate_acquisition_exception(self, resource_valid, fixed_clock, error):
        registry = RecordingRegistry(error=error)

        TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        assert len(registry.counter_calls) == 1

    def test_mock_counter_raising(self, resource_valid, fixed_clock):
        registry = MagicMock(spec=Registry)
        registry.counter.return_value.increment.side_effect = RuntimeError(
            "Somebody set up us the bomb"
        )

        TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        registry.counter.return_value.increment.assert_called_once()

    def test_failure_is_logged(self, resource_valid, fixed_clock):
        registry = RecordingRegistry(
            counter=RecordingCounter(error=RuntimeError("Somebody set up us the bomb"))
        )

        with capture_logs() as logs:
            TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)

        assert len(logs) == 1
        assert logs[0]["log_level"] == "error"
        assert logs[0]["metric_name"] == "keel.resource.checked"
        assert logs[0]["error"] == "Somebody set up us the bomb"
        assert logs[0]["error_type"] == "RuntimeError"

    def test_keyboard_interrupt_propagates(self, resource_valid, fixed_clock):
        registry = RecordingRegistry(error=KeyboardInterrupt())

        with pytest.raises(KeyboardInterrupt):
            TelemetryListener(registry, fixed_clock).on_resource_checked(resource_valid)


@pytest.mark.unit
class TestSubscribe:
    def test_receives_resource_check_events_from_bus(self, resource_valid, fixed_clock):
        bus = EventBus()
        registry = RecordingRegistry()
        TelemetryListener(registry, fixed_clock).subscribe(bus)

        assert bus.publish(resource_valid) == 1
        assert registry.handle.increments == 1

    def test_ignores_unrelated_events(self, fixed_clock):
        bus = EventBus()
        registry = RecordingRegistry()
        TelemetryListener(registry, fixed_clock).subscribe(bus)

        assert bus.publish("not a resource event") == 0
        assert registry.counter_calls == []

    def test_publisher_unaffected_by_registry_failure(self, resource_valid, fixed_clock):
        bus = EventBus()
        TelemetryListener(RecordingRegistry(error=RuntimeError("boom")), fixed_clock).subscribe(bus)

        assert bus.publish(resource_valid) == 1
