"""
RoomComponent: rooms, their occupancy, and the "room" triggers/constraints.

    scenario.when().room("office").occupied()
    scenario.constraint().room("hall").vacant()
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from home_scenarios.components.base import Component
from home_scenarios.core.bus import Event, EventFilter
from home_scenarios.core.errors import UnknownEntityError

from .room import DEFAULT_THRESHOLD_DURATION, Room

if TYPE_CHECKING:
    from home_scenarios.scenario import ConstraintScope, Scenario, TriggerScope
    from home_scenarios.scenario.models import Predicate

logger = logging.getLogger(__name__)

ROOM_CHANGED = "room.changed"


class RoomComponent(Component):
    """
    Component owning the rooms of a home.

    Every attribute change of a room is published as a "room.changed" event
    with payload {"attribute", "value", "previous"}.
    """

    def __init__(self, threshold_duration: float = DEFAULT_THRESHOLD_DURATION) -> None:
        """
        Initialize the component.

        Args:
            threshold_duration: Default vacancy debounce for new rooms (seconds)
        """
        super().__init__()
        self.threshold_duration = threshold_duration
        self._rooms: Dict[str, Room] = {}

    @property
    def id(self) -> str:
        return "room"

    def default_config(self) -> Dict[str, Any]:
        return {"threshold_duration": DEFAULT_THRESHOLD_DURATION}

    # =========================================================================
    # Rooms
    # =========================================================================

    @property
    def rooms(self) -> Dict[str, Room]:
        return dict(self._rooms)

    def add(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> Optional[Room]:
        """
        Add a room.

        Args:
            name: Unique room name
            attributes: Overrides for the default attributes

        Returns:
            The new Room, or None if a room with that name already exists
        """
        if name in self._rooms:
            logger.warning(f"Room '{name}' already exists, not adding it again")
            return None

        room = Room(
            name,
            self.registry.scheduler,
            on_change=self._change_handler(name),
            attributes=attributes,
            threshold_duration=self.threshold_duration,
        )
        self._rooms[name] = room
        logger.info(f"Added room: {name}")
        return room

    def get(self, name: str) -> Optional[Room]:
        """Get a room by name, or None."""
        return self._rooms.get(name)

    def remove(self, name: str) -> bool:
        """
        Remove a room, cancelling its pending vacancy check.

        Returns:
            True if the room existed
        """
        room = self._rooms.pop(name, None)
        if room is None:
            return False
        room.cancel_pending_check()
        logger.info(f"Removed room: {name}")
        return True

    def _change_handler(self, name: str) -> Callable[[str, Any, Any], None]:
        def on_change(key: str, value: Any, previous: Any) -> None:
            self.emit(ROOM_CHANGED, name, {"attribute": key, "value": value, "previous": previous})

        return on_change

    def _require(self, name: str) -> Room:
        room = self._rooms.get(name)
        if room is None:
            raise UnknownEntityError(f"Room '{name}' does not exist")
        return room

    # =========================================================================
    # Scenario DSL
    # =========================================================================

    def triggers(self, scenario: "Scenario") -> Dict[str, Callable[..., Any]]:
        return {"room": lambda name: RoomTrigger(self, scenario, self._require(name))}

    def constraints(
        self, scenario: "Scenario", predicates: List["Predicate"]
    ) -> Dict[str, Callable[..., Any]]:
        return {"room": lambda name: RoomConstraint(scenario, predicates, self._require(name))}


class RoomTrigger:
    """Trigger chain for one room."""

    def __init__(self, component: RoomComponent, scenario: "Scenario", room: Room) -> None:
        self._component = component
        self._scenario = scenario
        self._room = room

    def occupied(self) -> "TriggerScope":
        """Fire when the room becomes occupied."""
        return self._subscribe("occupied", lambda event: event.payload["value"] is True)

    def vacant(self) -> "TriggerScope":
        """Fire when the room becomes vacant."""
        return self._subscribe("vacant", lambda event: event.payload["value"] is False)

    def changes(self, attribute: str) -> "TriggerScope":
        """Fire on any change of a room attribute."""
        return self._subscribe(f"{attribute}_changes", None, attribute)

    def _subscribe(
        self,
        label: str,
        matches: Optional[Callable[[Event], bool]],
        attribute: str = "occupied",
    ) -> "TriggerScope":
        scenario = self._scenario

        def handler(event: Event) -> None:
            if event.payload.get("attribute") != attribute:
                return
            if matches is None or matches(event):
                scenario.assert_(event)

        handler.__name__ = f"room_{self._room.name}_{label}"
        self._component.bus.subscribe(
            handler,
            EventFilter(event_type=ROOM_CHANGED, source=self._component.id, entity=self._room.name),
        )
        return scenario.triggers


class RoomConstraint:
    """Constraint chain for one room."""

    def __init__(self, scenario: "Scenario", predicates: List["Predicate"], room: Room) -> None:
        self._scenario = scenario
        self._predicates = predicates
        self._room = room

    def occupied(self) -> "ConstraintScope":
        self._predicates.append(self._room.is_occupied)
        return self._scenario.constraint(self._predicates)

    def vacant(self) -> "ConstraintScope":
        room = self._room
        self._predicates.append(lambda: not room.is_occupied())
        return self._scenario.constraint(self._predicates)

    def attribute_equals(self, attribute: str, value: Any) -> "ConstraintScope":
        """Holds when the room attribute equals value."""
        room = self._room
        self._predicates.append(lambda: room.attributes.get(attribute) == value)
        return self._scenario.constraint(self._predicates)
