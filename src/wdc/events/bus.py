"""
Auction event bus.

The analytics adapter needs two things from the bus: the history of
events fired so far, and live subscription. InMemoryEventBus provides both
for tests and offline replays.
"""

from collections.abc import Callable
from typing import Any, Protocol

from ..logging import get_logger
from .models import EventType, RecordedEvent

Handler = Callable[[Any], None]

logger = get_logger(__name__)


class EventBus(Protocol):
    """Interface the analytics adapter consumes."""

    def get_events(self) -> list[RecordedEvent]:
        """Events fired so far, in firing order."""
        ...

    def on(self, event_type: EventType, handler: Handler) -> None:
        """Subscribe a handler to future events of one type."""
        ...


class InMemoryEventBus:
    """
    Synchronous event bus that records its history.

    Handlers run in the caller's context, in subscription order. Handler
    errors propagate to the caller of ``emit``.
    """

    def __init__(self) -> None:
        self._history: list[RecordedEvent] = []
        self._handlers: dict[EventType, list[Handler]] = {}

    def emit(self, event_type: EventType | str, args: Any = None) -> None:
        """Record an event and deliver it to current subscribers."""
        event_type = EventType(event_type)
        self._history.append(RecordedEvent(event_type=event_type, args=args))
        handlers = list(self._handlers.get(event_type, []))
        logger.debug("Event emitted", event_type=event_type.value, handlers=len(handlers))
        for handler in handlers:
            handler(args)

    def on(self, event_type: EventType | str, handler: Handler) -> None:
        self._handlers.setdefault(EventType(event_type), []).append(handler)

    def off(self, event_type: EventType | str, handler: Handler) -> None:
        handlers = self._handlers.get(EventType(event_type), [])
        if handler in handlers:
            handlers.remove(handler)

    def get_events(self) -> list[RecordedEvent]:
        return list(self._history)

    def handler_count(self, event_type: EventType | str | None = None) -> int:
        """Number of subscribed handlers, for one event type or overall."""
        if event_type is None:
            return sum(len(handlers) for handlers in self._handlers.values())
        return len(self._handlers.get(EventType(event_type), []))
