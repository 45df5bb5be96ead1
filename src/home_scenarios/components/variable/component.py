"""
VariableComponent: named values that scenarios can react to and test.

    mode = registry.component("variable").add("mode", "home")
    scenario.when().variable("mode").changes()
    scenario.constraint().variable("mode").equals("away")
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from home_scenarios.components.base import Component
from home_scenarios.core.attributes import AttributeStore
from home_scenarios.core.bus import Event, EventFilter
from home_scenarios.core.errors import UnknownEntityError

if TYPE_CHECKING:
    from home_scenarios.scenario import ConstraintScope, Scenario, TriggerScope
    from home_scenarios.scenario.models import Predicate

logger = logging.getLogger(__name__)

VARIABLE_CHANGED = "variable.changed"


class Variable:
    """A named value stored under the "value" attribute."""

    def __init__(self, name: str, store: AttributeStore) -> None:
        self.name = name
        self.attributes = store

    def __repr__(self) -> str:
        return f"Variable({self.name!r}, {self.value!r})"

    @property
    def value(self) -> Any:
        return self.attributes.get("value")

    def set(self, value: Any) -> bool:
        """Change the value without notifying scenarios."""
        return self.attributes.set("value", value)

    def update(self, value: Any) -> bool:
        """Change the value; publishes variable.changed if it differs."""
        return self.attributes.update("value", value)


class VariableComponent(Component):
    """Component owning named variables."""

    def __init__(self) -> None:
        super().__init__()
        self._variables: Dict[str, Variable] = {}

    @property
    def id(self) -> str:
        return "variable"

    def add(self, name: str, value: Any = None) -> Optional[Variable]:
        """
        Add a variable.

        Returns:
            The new Variable, or None if the name is taken
        """
        if name in self._variables:
            logger.warning(f"Variable '{name}' already exists, not adding it again")
            return None

        store = AttributeStore(name, self._change_handler(name), {"value": value})
        variable = Variable(name, store)
        self._variables[name] = variable
        logger.info(f"Added variable: {name}={value!r}")
        return variable

    def get(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def _change_handler(self, name: str) -> Callable[[str, Any, Any], None]:
        def on_change(key: str, value: Any, previous: Any) -> None:
            self.emit(VARIABLE_CHANGED, name, {"attribute": key, "value": value, "previous": previous})

        return on_change

    def _require(self, name: str) -> Variable:
        variable = self._variables.get(name)
        if variable is None:
            raise UnknownEntityError(f"Variable '{name}' does not exist")
        return variable

    def triggers(self, scenario: "Scenario") -> Dict[str, Callable[..., Any]]:
        return {"variable": lambda name: VariableTrigger(self, scenario, self._require(name))}

    def constraints(
        self, scenario: "Scenario", predicates: List["Predicate"]
    ) -> Dict[str, Callable[..., Any]]:
        return {
            "variable": lambda name: VariableConstraint(scenario, predicates, self._require(name))
        }


class VariableTrigger:
    """Trigger chain for one variable."""

    def __init__(self, component: VariableComponent, scenario: "Scenario", variable: Variable):
        self._component = component
        self._scenario = scenario
        self._variable = variable

    def changes(self) -> "TriggerScope":
        """Fire on every change of the value."""
        return self._subscribe("changes", lambda event: True)

    def equals(self, value: Any) -> "TriggerScope":
        """Fire when the value changes to value."""
        return self._subscribe("equals", lambda event: event.payload["value"] == value)

    def _subscribe(self, label: str, matches: Callable[[Event], bool]) -> "TriggerScope":
        scenario = self._scenario

        def handler(event: Event) -> None:
            if matches(event):
                scenario.assert_(event)

        handler.__name__ = f"variable_{self._variable.name}_{label}"
        self._component.bus.subscribe(
            handler,
            EventFilter(
                event_type=VARIABLE_CHANGED,
                source=self._component.id,
                entity=self._variable.name,
            ),
        )
        return scenario.triggers


class VariableConstraint:
    """Constraint chain for one variable."""

    def __init__(self, scenario: "Scenario", predicates: List["Predicate"], variable: Variable):
        self._scenario = scenario
        self._predicates = predicates
        self._variable = variable

    def equals(self, value: Any) -> "ConstraintScope":
        variable = self._variable
        return self._push(lambda: variable.value == value)

    def is_true(self) -> "ConstraintScope":
        variable = self._variable
        return self._push(lambda: variable.value is True)

    def is_false(self) -> "ConstraintScope":
        variable = self._variable
        return self._push(lambda: variable.value is False)

    def _push(self, predicate: "Predicate") -> "ConstraintScope":
        self._predicates.append(predicate)
        return self._scenario.constraint(self._predicates)
