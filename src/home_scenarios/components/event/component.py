"""
EventComponent: named custom events.

    registry.component("event").emit("doorbell", {"button": 1})
    scenario.when().event("doorbell").on()
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from home_scenarios.components.base import Component
from home_scenarios.core.bus import Event, EventFilter

if TYPE_CHECKING:
    from home_scenarios.scenario import Scenario, TriggerScope

logger = logging.getLogger(__name__)

EVENT_FIRED = "event.fired"


class EventComponent(Component):
    """Publishes and subscribes to free-form named events."""

    @property
    def id(self) -> str:
        return "event"

    def emit_event(self, name: str, payload: Optional[Dict[str, Any]] = None) -> None:
        """
        Fire a named event.

        Args:
            name: Event name (e.g., "doorbell")
            payload: Optional event data
        """
        logger.debug(f"Firing event: {name}")
        self.emit(EVENT_FIRED, name, dict(payload or {}))

    def triggers(self, scenario: "Scenario") -> Dict[str, Callable[..., Any]]:
        return {"event": lambda name: EventTrigger(self, scenario, name)}


class EventTrigger:
    """Trigger chain for one named event."""

    def __init__(self, component: EventComponent, scenario: "Scenario", name: str) -> None:
        self._component = component
        self._scenario = scenario
        self._name = name

    def on(self) -> "TriggerScope":
        """Fire every time the event is emitted."""
        scenario = self._scenario

        def handler(event: Event) -> None:
            scenario.assert_(event)

        handler.__name__ = f"event_{self._name}"
        self._component.bus.subscribe(
            handler,
            EventFilter(event_type=EVENT_FIRED, source=self._component.id, entity=self._name),
        )
        return scenario.triggers
