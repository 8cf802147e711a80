"""
Metrics registry interfaces and adapters.

A Registry hands out Counter handles identified by a metric name plus tags.
Adapters:
- NoopRegistry: discards everything, used when metrics are disabled
- InMemoryRegistry: keeps counts in process, useful locally and in tests
- OpenTelemetryRegistry: records into an OpenTelemetry Meter
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, NamedTuple, TypeAlias

import structlog

from spinnaker.keel.exceptions import RegistryError

if TYPE_CHECKING:
    from opentelemetry.metrics import Counter as OtelCounter
    from opentelemetry.metrics import Meter

logger = structlog.get_logger(__name__)


class Tag(NamedTuple):
    """Key/value label attached to a metric series."""

    key: str
    value: str


TagSet: TypeAlias = tuple[Tag, ...]


def _normalize_tags(tags: Iterable[Tag | tuple[str, object]]) -> TagSet:
    return tuple(Tag(str(key), str(value)) for key, value in tags)


class Counter(ABC):
    """Monotonically increasing metric series.

    In-process handles also expose count(); backend handles do not.
    """

    @abstractmethod
    def increment(self, amount: int = 1) -> None:
        """Increment the counter."""
        pass


class Registry(ABC):
    """Source of counter handles."""

    @abstractmethod
    def counter(self, name: str, tags: Iterable[Tag] = ()) -> Counter:
        """
        Get a counter for a metric name and tag set.

        Implementations may return the same handle for identical (name, tags).
        """
        pass


class _NoopCounter(Counter):
    def increment(self, amount: int = 1) -> None:
        return None

    def count(self) -> int:
        return 0


class NoopRegistry(Registry):
    """Registry that records nothing."""

    _counter = _NoopCounter()

    def counter(self, name: str, tags: Iterable[Tag] = ()) -> Counter:
        return self._counter


class _InMemoryCounter(Counter):
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._count = 0

    def increment(self, amount: int = 1) -> None:
        # Non-positive amounts are ignored, counters never go down.
        if amount <= 0:
            return
        with self._lock:
            self._count += amount

    def count(self) -> int:
        return self._count


class InMemoryRegistry(Registry):
    """Thread-safe registry keeping counts in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[tuple[str, frozenset[Tag]], _InMemoryCounter] = {}

    def counter(self, name: str, tags: Iterable[Tag] = ()) -> Counter:
        key = (name, frozenset(_normalize_tags(tags)))
        with self._lock:
            handle = self._counters.get(key)
            if handle is None:
                handle = _InMemoryCounter(self._lock)
                self._counters[key] = handle
        return handle

    def counters(self) -> dict[tuple[str, frozenset[Tag]], int]:
        """Snapshot of all counts keyed by (name, tags)."""
        with self._lock:
            return {key: handle._count for key, handle in self._counters.items()}


class _OpenTelemetryCounter(Counter):
    def __init__(self, instrument: "OtelCounter", attributes: dict[str, str]) -> None:
        self._instrument = instrument
        self._attributes = attributes

    def increment(self, amount: int = 1) -> None:
        self._instrument.add(amount, attributes=self._attributes)


class OpenTelemetryRegistry(Registry):
    """Registry backed by an OpenTelemetry Meter.

    One Counter instrument is created per metric name; tags become the
    attributes of each recorded measurement. Handles do not report counts,
    read them through a MetricReader on the MeterProvider instead.
    """

    def __init__(self, meter: "Meter") -> None:
        self.meter = meter
        self._lock = threading.Lock()
        self._instruments: dict[str, "OtelCounter"] = {}

    def _instrument(self, name: str) -> "OtelCounter":
        with self._lock:
            instrument = self._instruments.get(name)
            if instrument is None:
                try:
                    instrument = self.meter.create_counter(name=name)
                except Exception as e:
                    raise RegistryError(
                        f"Failed to create counter {name!r}: {e}", metric_name=name
                    ) from e
                self._instruments[name] = instrument
                logger.debug("OpenTelemetry counter created", metric_name=name)
        return instrument

    def counter(self, name: str, tags: Iterable[Tag] = ()) -> Counter:
        attributes = {tag.key: tag.value for tag in _normalize_tags(tags)}
        return _OpenTelemetryCounter(self._instrument(name), attributes)
