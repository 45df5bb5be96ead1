"""
Event Bus implementation for component events.

The Event Bus is a simple, synchronous dispatcher for domain events.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Optional, Dict, Any, Callable, List
import logging

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Get current UTC time (for default factory)."""
    return datetime.now(UTC)


@dataclass
class Event:
    """
    A domain event published by a component.

    Attributes:
        type: Event type (e.g., "room.changed", "event.fired")
        source: Component that published the event (e.g., "room", "variable")
        entity: Optional entity name this event relates to (e.g., "office")
        payload: Event-specific data
        timestamp: When the event occurred
    """

    type: str
    source: str
    entity: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)


class EventFilter:
    """
    Filter for event subscriptions.

    Allows subscribers to filter events by type, source component, and entity.
    """

    def __init__(
        self,
        event_type: Optional[str] = None,
        source: Optional[str] = None,
        entity: Optional[str] = None,
    ):
        """
        Initialize an event filter.

        Args:
            event_type: Filter by event type (None = all types)
            source: Filter by source component (None = all components)
            entity: Filter by entity name (None = all entities)
        """
        self.event_type = event_type
        self.source = source
        self.entity = entity

    def matches(self, event: Event) -> bool:
        """
        Check if an event matches this filter.

        Args:
            event: The event to check

        Returns:
            True if the event matches the filter
        """
        if self.event_type is not None and event.type != self.event_type:
            return False

        if self.source is not None and event.source != self.source:
            return False

        if self.entity is not None and event.entity != self.entity:
            return False

        return True

    def __repr__(self) -> str:
        return (
            f"EventFilter(event_type={self.event_type!r}, "
            f"source={self.source!r}, entity={self.entity!r})"
        )


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Simple, synchronous event bus shared by all components of a registry.

    Handlers run in registration order. A failing handler is logged and its
    exception propagates to the publisher; handlers after it are not called
    for that event.
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._handlers: List[tuple[EventFilter, EventHandler]] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_filter: Optional[EventFilter] = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Callable that receives Event objects
            event_filter: Optional filter for events (None = receive all events)
        """
        if event_filter is None:
            event_filter = EventFilter()

        self._handlers.append((event_filter, handler))
        logger.debug(f"Subscribed handler {_name_of(handler)} with filter {event_filter}")

    def publish(self, event: Event) -> None:
        """
        Publish an event to all matching subscribers.

        Args:
            event: The event to publish

        Raises:
            Exception: Whatever a handler raised
        """
        logger.debug(f"Publishing event: {event.type} from {event.source} ({event.entity})")

        # Handlers subscribed during dispatch only see later events
        for event_filter, handler in list(self._handlers):
            if not event_filter.matches(event):
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in event handler {_name_of(handler)} "
                    f"for event {event.type}: {e}",
                    exc_info=True,
                )
                raise

    def unsubscribe(self, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from all events.

        Args:
            handler: The handler to unsubscribe
        """
        self._handlers = [(f, h) for f, h in self._handlers if h != handler]
        logger.debug(f"Unsubscribed handler {_name_of(handler)}")

    def handler_count(self) -> int:
        """Number of registered subscriptions."""
        return len(self._handlers)


def _name_of(handler: EventHandler) -> str:
    return getattr(handler, "__name__", repr(handler))
