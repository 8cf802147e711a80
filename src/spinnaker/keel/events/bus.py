"""
In-process event bus.

Handlers subscribe to an event class and receive every published event that
is an instance of it. Dispatch is synchronous, in subscription order. A
failing handler is logged and never affects the publisher or other handlers.
"""

import threading
from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

EventHandler = Callable[[Any], Any]


class EventBus:
    """Synchronous publish/subscribe dispatcher keyed by event class."""

    def __init__(self) -> None:
        self._subscriptions: list[tuple[type, EventHandler]] = []
        self._lock = threading.Lock()

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event class.

        Args:
            event_type: Event class; subclasses are delivered too
            handler: Callable invoked with the event
        """
        with self._lock:
            self._subscriptions.append((event_type, handler))

        logger.debug(
            "Event handler subscribed",
            event_type=event_type.__name__,
            handler=getattr(handler, "__qualname__", repr(handler)),
        )

    def unsubscribe(self, event_type: type, handler: EventHandler) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        with self._lock:
            try:
                self._subscriptions.remove((event_type, handler))
            except ValueError:
                return False
        return True

    def handlers_for(self, event: Any) -> list[EventHandler]:
        """Handlers that would receive the given event, in dispatch order."""
        with self._lock:
            return [
                handler
                for event_type, handler in self._subscriptions
                if isinstance(event, event_type)
            ]

    def publish(self, event: Any) -> int:
        """
        Dispatch an event to all matching handlers.

        Args:
            event: Event instance

        Returns:
            Number of handlers that completed without raising
        """
        completed = 0
        for handler in self.handlers_for(event):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_type=type(event).__name__,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                    exc_info=True,
                )
                continue
            completed += 1
        return completed


# Global event bus instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get global event bus instance (singleton)."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus (mainly for testing)."""
    global _event_bus
    _event_bus = None
