"""
Base class for home-scenarios components.

Components are plug-ins that own entities (rooms, variables, ...) and expose
triggers and constraints to the scenario DSL.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from home_scenarios.core.bus import Event, EventBus

if TYPE_CHECKING:
    from home_scenarios.core.registry import ComponentRegistry
    from home_scenarios.scenario import Scenario
    from home_scenarios.scenario.models import Predicate


class Component(ABC):
    """
    Base class for components.

    A component:
    - Is attached to one ComponentRegistry and publishes on its EventBus
    - Keeps its entities' state in AttributeStores
    - Returns trigger factories: chains that subscribe on the bus and call
      scenario.assert_(event), returning scenario.triggers
    - Returns constraint factories: chains that append a zero-argument
      predicate and return scenario.constraint(predicates)
    """

    def __init__(self) -> None:
        self._registry: Optional["ComponentRegistry"] = None

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique name of this component in the registry."""
        pass

    def attach(self, registry: "ComponentRegistry") -> None:
        """
        Attach the component to a registry.

        Args:
            registry: The host registry
        """
        self._registry = registry

    @property
    def registry(self) -> "ComponentRegistry":
        if self._registry is None:
            raise RuntimeError(f"Component '{self.id}' is not attached to a registry")
        return self._registry

    @property
    def bus(self) -> EventBus:
        return self.registry.bus

    def default_config(self) -> Dict[str, Any]:
        """
        Get default configuration for this component.

        Returns:
            Default configuration dict
        """
        return {}

    def triggers(self, scenario: "Scenario") -> Dict[str, Callable[..., Any]]:
        """
        Trigger factories offered to the scenario DSL.

        Args:
            scenario: Scenario being built

        Returns:
            Mapping of trigger name to factory
        """
        return {}

    def constraints(
        self, scenario: "Scenario", predicates: List["Predicate"]
    ) -> Dict[str, Callable[..., Any]]:
        """
        Constraint factories offered to the scenario DSL.

        Args:
            scenario: Scenario being built
            predicates: Predicate list of the open constraint group

        Returns:
            Mapping of constraint name to factory
        """
        return {}

    def emit(self, event_type: str, entity: Optional[str], payload: Dict[str, Any]) -> None:
        """Publish an event from this component on the shared bus."""
        self.bus.publish(Event(type=event_type, source=self.id, entity=entity, payload=payload))
