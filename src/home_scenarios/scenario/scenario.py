"""
Scenario: fluent builder and evaluator for one automation rule.

A scenario is declared as triggers, then constraint groups, then callbacks:

    registry.scenario("Office lights")
        .when()
            .room("office").occupied()
            .event("doorbell").on()
        .constraint()
            .variable("mode").equals("home")
            .then(turn_on_lights)
        .else_()
            .then(log_ignored)

Triggers call assert_(payload) when they fire. assert_ evaluates every
constraint group in declaration order and runs the callback of each group
that matches; the else group runs only when none matched.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from home_scenarios.core.errors import ScenarioBuildError

from .models import ConstraintGroup, GroupKind, Predicate, ScenarioCallback
from .scopes import ConstraintScope, TriggerScope

if TYPE_CHECKING:
    from home_scenarios.core.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class Scenario:
    """
    A rule composed of triggers, constraint groups, and callbacks.

    Attributes:
        registry: Host the scenario resolves components against
        description: Human-readable name
        runnable: False until a trigger is wired; set to False to disable
        test_mode: True after test() was called
    """

    def __init__(self, registry: "ComponentRegistry", description: str) -> None:
        """
        Initialize a scenario.

        Args:
            registry: ComponentRegistry providing triggers and constraints
            description: Human-readable name (non-empty)

        Raises:
            ScenarioBuildError: If registry or description is missing
        """
        if registry is None:
            raise ScenarioBuildError("A scenario needs a component registry")
        if not isinstance(description, str) or not description.strip():
            raise ScenarioBuildError("A scenario needs a non-empty description")

        self.registry = registry
        self.description = description
        self.runnable = False
        self.test_mode = False

        self._trigger_count = 0
        self._groups: List[ConstraintGroup] = []
        self._else_group: Optional[ConstraintGroup] = None
        self._default_group = ConstraintGroup(kind=GroupKind.DEFAULT)
        self._open_group = self._default_group
        self._triggers = TriggerScope(self)

    def __repr__(self) -> str:
        return f"Scenario({self.description!r})"

    # =========================================================================
    # Builder
    # =========================================================================

    @property
    def triggers(self) -> TriggerScope:
        """The trigger scope; trigger chains return it for OR-chaining."""
        return self._triggers

    @property
    def groups(self) -> List[ConstraintGroup]:
        """Constraint groups in declaration order (without default and else)."""
        return list(self._groups)

    @property
    def trigger_count(self) -> int:
        return self._trigger_count

    def when(self, custom: Optional[Callable[["Scenario"], Any]] = None) -> TriggerScope:
        """
        Start the trigger phase.

        Args:
            custom: Optional function wiring its own subscriptions. It is
                called with this scenario and should return scenario.triggers.

        Returns:
            The trigger scope
        """
        if custom is None:
            return self._triggers

        result = custom(self)
        self._trigger_wired(getattr(custom, "__name__", "custom"))
        return result if result is not None else self._triggers

    def constraint(self, predicates: Optional[List[Predicate]] = None) -> ConstraintScope:
        """
        Open a new constraint group, or return the scope of an existing one.

        Args:
            predicates: Predicate list of an already opened group. Component
                constraint chains pass it to keep adding to the same group.

        Returns:
            Scope of the group
        """
        if predicates is not None:
            for group in self._all_groups():
                if group.predicates is predicates:
                    return ConstraintScope(self, group)
            raise ScenarioBuildError(
                f"Scenario '{self.description}': predicates do not belong to any group"
            )

        group = ConstraintGroup(kind=GroupKind.CONSTRAINT)
        self._groups.append(group)
        self._open_group = group
        logger.debug(f"Scenario '{self.description}': opened constraint group {len(self._groups)}")
        return ConstraintScope(self, group)

    def else_(self) -> ConstraintScope:
        """
        Open the else group.

        Raises:
            ScenarioBuildError: If the scenario already has one
        """
        if self._else_group is not None:
            raise ScenarioBuildError(f"Scenario '{self.description}' already has an else branch")

        self._else_group = ConstraintGroup(kind=GroupKind.ELSE)
        self._open_group = self._else_group
        return ConstraintScope(self, self._else_group)

    def then(self, callback: ScenarioCallback) -> "Scenario":
        """
        Bind a callback to the currently open group.

        The callback is called with (scenario, payload).
        """
        group = self._open_group
        if group.callback is not None:
            logger.warning(
                f"Scenario '{self.description}': replacing callback of {group.kind.value} group"
            )
        group.callback = callback
        return self

    def test(self) -> "Scenario":
        """Put the scenario, and its host, in test mode."""
        self.test_mode = True
        self.registry.update_test_mode(True)
        return self

    def _trigger_wired(self, name: str) -> None:
        self._trigger_count += 1
        self.runnable = True
        logger.debug(f"Scenario '{self.description}': wired trigger '{name}'")

    def _all_groups(self) -> List[ConstraintGroup]:
        groups = [self._default_group, *self._groups]
        if self._else_group is not None:
            groups.append(self._else_group)
        return groups

    # =========================================================================
    # Evaluation
    # =========================================================================

    def assert_(self, payload: Any = None) -> bool:
        """
        Evaluate the scenario.

        Every constraint group whose predicates all hold has its callback
        invoked; groups are independent of each other. The else group runs
        only if no group matched. Exceptions from predicates and callbacks
        propagate to the caller.

        Args:
            payload: Passed to callbacks (triggers pass their Event)

        Returns:
            True if at least one callback was invoked
        """
        if not self.runnable or self._trigger_count == 0:
            logger.debug(f"Scenario '{self.description}' is not runnable, skipping")
            return False

        # A then() before any constraint() acts as a leading always-true group
        groups = list(self._groups)
        if self._default_group.callback is not None:
            groups.insert(0, self._default_group)

        matched = 0
        fired = 0

        for index, group in enumerate(groups):
            if not group.matches():
                logger.debug(f"Scenario '{self.description}': group {index} not met")
                continue

            matched += 1
            if group.callback is not None:
                group.callback(self, payload)
                fired += 1

        if matched == 0 and self._else_group is not None and self._else_group.matches():
            if self._else_group.callback is not None:
                self._else_group.callback(self, payload)
                fired += 1

        if fired:
            logger.info(f"Scenario '{self.description}': {fired} callback(s) invoked")
        return fired > 0
