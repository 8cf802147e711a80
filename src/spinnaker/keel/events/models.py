"""
Resource lifecycle events.

Each concrete event records the outcome of a single resource check. The
state is fixed by the event type rather than passed in by the producer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from spinnaker.keel.events.kinds import ResourceKind


class ResourceState(Enum):
    """Outcome of a resource validity check."""

    VALID = "valid"
    INVALID = "invalid"
    DIFF = "diff"
    MISSING = "missing"
    ERROR = "error"


@dataclass(frozen=True, kw_only=True)
class ResourceCheckResult:
    """Base class for all resource check events."""

    kind: ResourceKind
    id: str
    version: int
    application: str
    timestamp: datetime
    state: ResourceState = field(init=False)

    def __post_init__(self) -> None:
        if type(self) is ResourceCheckResult:
            raise TypeError(
                "ResourceCheckResult is abstract, publish one of its subclasses instead"
            )


@dataclass(frozen=True, kw_only=True)
class ResourceValid(ResourceCheckResult):
    """Actual state matches desired state."""

    state: ResourceState = field(default=ResourceState.VALID, init=False)


@dataclass(frozen=True, kw_only=True)
class ResourceInvalid(ResourceCheckResult):
    """Desired state could not be validated."""

    state: ResourceState = field(default=ResourceState.INVALID, init=False)


@dataclass(frozen=True, kw_only=True)
class ResourceDeltaDetected(ResourceCheckResult):
    """Actual state differs from desired state."""

    state: ResourceState = field(default=ResourceState.DIFF, init=False)


@dataclass(frozen=True, kw_only=True)
class ResourceMissing(ResourceCheckResult):
    """Resource does not exist yet."""

    state: ResourceState = field(default=ResourceState.MISSING, init=False)


@dataclass(frozen=True, kw_only=True)
class ResourceCheckError(ResourceCheckResult):
    """Checking the resource failed."""

    reason: str | None = None
    state: ResourceState = field(default=ResourceState.ERROR, init=False)
