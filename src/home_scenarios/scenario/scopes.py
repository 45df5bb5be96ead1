"""
Fluent scopes returned while building a scenario.

Scopes hold no state of their own; every call mutates the Scenario they
belong to. Component triggers and constraints are looked up by attribute
name in the scenario's ComponentRegistry:

    scenario.when().room("office").occupied()   # trigger "room"
    scenario.constraint().variable("mode").equals("away")   # constraint "variable"
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List

from home_scenarios.core.errors import UnknownConstraintError, UnknownTriggerError

from .models import ConstraintGroup, Predicate, ScenarioCallback

if TYPE_CHECKING:
    from .scenario import Scenario

logger = logging.getLogger(__name__)


class TriggerScope:
    """
    Scope returned by Scenario.when().

    A trigger is wired once its chain reaches a terminal method that returns
    this scope again; chained triggers act as OR.
    """

    def __init__(self, scenario: "Scenario") -> None:
        self._scenario = scenario

    def empty(self) -> "TriggerScope":
        """A trigger that subscribes to nothing; the scenario runs on assert_() only."""
        self._scenario._trigger_wired("empty")
        return self

    def resolve(self, name: str) -> Callable[..., Any]:
        """
        Resolve a trigger factory by name.

        Raises:
            UnknownTriggerError: If no registered component provides it
        """
        factories = self.available()
        if name not in factories:
            raise UnknownTriggerError(
                f"Unknown trigger '{name}' in scenario '{self._scenario.description}' "
                f"(available: {sorted(factories)})"
            )
        factory = factories[name]

        def build(*args: Any, **kwargs: Any) -> "_TriggerChain":
            return _TriggerChain(self._scenario, name, factory(*args, **kwargs))

        return build

    def available(self) -> Dict[str, Callable[..., Any]]:
        """Trigger factories of all registered components, by name."""
        factories: Dict[str, Callable[..., Any]] = {}
        for component in self._scenario.registry.all().values():
            for name, factory in component.triggers(self._scenario).items():
                factories.setdefault(name, factory)
        return factories

    def constraint(self) -> "ConstraintScope":
        return self._scenario.constraint()

    def else_(self) -> "ConstraintScope":
        return self._scenario.else_()

    def then(self, callback: ScenarioCallback) -> "Scenario":
        return self._scenario.then(callback)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)


class _TriggerChain:
    """Marks the scenario wired when a trigger chain returns to the trigger scope."""

    def __init__(self, scenario: "Scenario", name: str, chain: Any) -> None:
        self._scenario = scenario
        self._name = name
        self._chain = chain

    def __getattr__(self, attr: str) -> Any:
        if attr.startswith("_"):
            raise AttributeError(attr)
        value = getattr(self._chain, attr)
        if not callable(value):
            return value

        def call(*args: Any, **kwargs: Any) -> Any:
            result = value(*args, **kwargs)
            if isinstance(result, TriggerScope):
                self._scenario._trigger_wired(self._name)
            return result

        return call


class ConstraintScope:
    """
    Scope for one open constraint group.

    Constraint chains push a predicate into the group and return this scope,
    so chained constraints act as AND.
    """

    def __init__(self, scenario: "Scenario", group: ConstraintGroup) -> None:
        self._scenario = scenario
        self._group = group

    @property
    def predicates(self) -> List[Predicate]:
        return self._group.predicates

    def resolve(self, name: str) -> Callable[..., Any]:
        """
        Resolve a constraint factory by name.

        Raises:
            UnknownConstraintError: If no registered component provides it
        """
        factories = self.available()
        if name not in factories:
            raise UnknownConstraintError(
                f"Unknown constraint '{name}' in scenario '{self._scenario.description}' "
                f"(available: {sorted(factories)})"
            )
        logger.debug(f"Scenario '{self._scenario.description}': constraint '{name}'")
        return factories[name]

    def available(self) -> Dict[str, Callable[..., Any]]:
        """Constraint factories of all registered components, by name."""
        factories: Dict[str, Callable[..., Any]] = {}
        for component in self._scenario.registry.all().values():
            constraints = component.constraints(self._scenario, self._group.predicates)
            for name, factory in constraints.items():
                factories.setdefault(name, factory)
        return factories

    def where(self, predicate: Predicate) -> "ConstraintScope":
        """Add a plain zero-argument predicate to the group."""
        self._group.predicates.append(predicate)
        return self

    def then(self, callback: ScenarioCallback) -> "Scenario":
        return self._scenario.then(callback)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)
