"""
ComponentRegistry: the host that scenarios are built against.

The registry owns the components, not the behavior.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from home_scenarios.core.bus import EventBus
from home_scenarios.core.errors import UnknownComponentError
from home_scenarios.core.scheduler import Scheduler, ThreadingScheduler

if TYPE_CHECKING:
    from home_scenarios.components.base import Component
    from home_scenarios.scenario import Scenario

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """
    Resolves component names to component objects.

    Responsibilities:
    - Hold the registered components (room, event, variable, ...)
    - Share one EventBus and one Scheduler between them
    - Carry the host-wide test mode flag

    Several registries can live side by side (e.g., one per test); nothing
    here is global.
    """

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        """
        Initialize an empty registry.

        Args:
            bus: Event bus shared by components (new one if omitted)
            scheduler: Scheduler for delayed work (ThreadingScheduler if omitted)
        """
        self.bus = bus or EventBus()
        self.scheduler = scheduler or ThreadingScheduler()
        self.test_mode = False
        self._components: Dict[str, "Component"] = {}
        self._scenarios: List["Scenario"] = []

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        bus: Optional[EventBus] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> "ComponentRegistry":
        """
        Build a registry with the components named in a configuration.

        Each entry of config["components"] is {"name": ..., **options}; the
        options are passed to the component constructor.

        Raises:
            UnknownComponentError: If a component name is not known
        """
        from home_scenarios.components import COMPONENT_TYPES

        registry = cls(bus=bus, scheduler=scheduler)
        for entry in config.get("components", []):
            options = dict(entry)
            name = options.pop("name")
            component_type = COMPONENT_TYPES.get(name)
            if component_type is None:
                raise UnknownComponentError(f"Unknown component type '{name}'")
            registry.register(component_type(**options))

        return registry

    def register(self, component: "Component") -> "Component":
        """
        Register and attach a component.

        Args:
            component: The component to add

        Returns:
            The same component

        Raises:
            ValueError: If a component with the same id is already registered
        """
        if component.id in self._components:
            raise ValueError(f"Component '{component.id}' is already registered")

        self._components[component.id] = component
        component.attach(self)
        logger.info(f"Registered component: {component.id}")
        return component

    def component(self, name: str) -> "Component":
        """
        Get a component by name.

        Raises:
            UnknownComponentError: If no such component is registered
        """
        try:
            return self._components[name]
        except KeyError:
            raise UnknownComponentError(f"Component '{name}' is not registered") from None

    def all(self) -> Dict[str, "Component"]:
        """All registered components, by name."""
        return dict(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def update_test_mode(self, flag: bool) -> None:
        """Switch the host in or out of test mode."""
        if self.test_mode != flag:
            logger.info(f"Test mode {'enabled' if flag else 'disabled'}")
        self.test_mode = flag

    # =========================================================================
    # Scenarios
    # =========================================================================

    def scenario(self, description: str) -> "Scenario":
        """Create a scenario bound to this registry."""
        from home_scenarios.scenario import Scenario

        scenario = Scenario(self, description)
        self._scenarios.append(scenario)
        return scenario

    def scenarios(self) -> List["Scenario"]:
        """Scenarios created through scenario()."""
        return list(self._scenarios)
