"""
Keel exceptions.

Errors raised by the event model and the metrics registry adapters.
"""

from typing import Any


class KeelError(Exception):
    """
    Base Keel error with context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context data about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or "KEEL_ERROR"
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for structured logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class InvalidResourceKind(KeelError):
    """Raised when a resource kind string cannot be parsed."""

    def __init__(self, value: str):
        super().__init__(
            f"Invalid resource kind {value!r}, expected <group>/<kind>@<version>",
            "INVALID_RESOURCE_KIND",
            context={"value": value},
        )
        self.value = value


class RegistryError(KeelError):
    """Raised by a metrics registry adapter when the backend rejects a metric."""

    def __init__(self, message: str, metric_name: str | None = None):
        super().__init__(
            message,
            "REGISTRY_ERROR",
            context={"metric_name": metric_name} if metric_name else None,
        )
        self.metric_name = metric_name
