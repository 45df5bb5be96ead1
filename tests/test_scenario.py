"""Tests for the Scenario builder and evaluator."""

from unittest.mock import Mock

import pytest

from home_scenarios import ComponentRegistry, Event, EventFilter, ManualScheduler, Scenario
from home_scenarios.components.base import Component
from home_scenarios.core.errors import (
    ScenarioBuildError,
    UnknownConstraintError,
    UnknownTriggerError,
)


class FoobarComponent(Component):
    """Minimal component: triggers on any event type, constrains on a fixed value."""

    @property
    def id(self) -> str:
        return "foobar"

    def triggers(self, scenario):
        return {"foobar": lambda: FoobarTrigger(self, scenario)}

    def constraints(self, scenario, predicates):
        return {"foobar": lambda: FoobarConstraint(scenario, predicates)}


class FoobarTrigger:
    def __init__(self, component, scenario):
        self._component = component
        self._scenario = scenario

    def on_event(self, event_type):
        scenario = self._scenario

        def handler(event):
            scenario.assert_(event_type)

        self._component.bus.subscribe(handler, EventFilter(event_type=event_type))
        return scenario.triggers


class FoobarConstraint:
    def __init__(self, scenario, predicates):
        self._scenario = scenario
        self._predicates = predicates

    def is_true(self, value):
        self._predicates.append(lambda: value is True)
        return self._scenario.constraint(self._predicates)


@pytest.fixture
def registry():
    """Create a registry with the foobar component."""
    registry = ComponentRegistry(scheduler=ManualScheduler())
    registry.register(FoobarComponent())
    return registry


def fire(registry, event_type):
    """Publish a bare event on the registry bus."""
    registry.bus.publish(Event(type=event_type, source="test"))


class TestCreatingBasicScenarios:
    """Tests for construction and the simplest chains."""

    def test_setup(self, registry):
        """Test that a scenario is set up with its description and scopes."""
        scenario = Scenario(registry, "Foobar")

        assert scenario.description == "Foobar"
        assert scenario.registry is registry
        assert scenario.runnable is False
        assert scenario.test_mode is False
        assert "foobar" in scenario.triggers.available()
        assert callable(scenario.triggers.empty)
        assert callable(scenario.triggers.constraint)
        assert callable(scenario.triggers.then)

    def test_returns_the_correct_scopes(self, registry):
        """Test that each chain step returns the next usable scope."""
        callback = Mock()

        scenario = Scenario(registry, "Foobar")
        when = scenario.when()
        empty = when.empty()
        then = empty.then(callback)

        assert when is scenario.triggers
        assert empty is scenario.triggers
        assert then is scenario

        assert then.assert_() is True
        callback.assert_called_once_with(scenario, None)

    def test_not_runnable(self, registry):
        """Test that a disabled scenario returns False and calls nothing."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar").when().empty().then(callback)

        scenario.runnable = False

        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_payload_is_passed(self, registry):
        """Test that the callback receives the scenario and the payload."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar").when().empty().then(callback)

        scenario.assert_("foobar result")
        scenario.assert_({"a": "b"})

        assert callback.call_args_list[0].args == (scenario, "foobar result")
        assert callback.call_args_list[1].args == (scenario, {"a": "b"})

    def test_no_triggers(self, registry):
        """Test that a scenario without triggers never runs."""
        assert Scenario(registry, "Foobar").assert_() is False

        callback = Mock()
        scenario = Scenario(registry, "Foobar").when().then(callback)
        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_missing_registry_or_description(self, registry):
        """Test that construction fails without registry or description."""
        with pytest.raises(ScenarioBuildError):
            Scenario(None, "Foobar")
        with pytest.raises(ScenarioBuildError):
            Scenario(registry, "")
        with pytest.raises(ScenarioBuildError):
            Scenario(registry, "   ")
        with pytest.raises(TypeError):
            Scenario(registry)

    def test_unknown_trigger(self, registry):
        """Test that an unknown trigger fails at build time."""
        scenario = Scenario(registry, "Foobar")

        with pytest.raises(UnknownTriggerError):
            scenario.when().foo()

        assert scenario.runnable is False

    def test_unknown_constraint(self, registry):
        """Test that an unknown constraint fails at build time."""
        with pytest.raises(UnknownConstraintError):
            Scenario(registry, "Foobar").when().empty().constraint().bar()

    def test_build_errors_are_value_errors(self, registry):
        """Test that build errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            Scenario(registry, "Foobar").when().foo()

    def test_unknown_names_behave_as_missing_attributes(self, registry):
        """Test that hasattr/getattr treat unknown trigger and constraint names as missing."""
        scenario = Scenario(registry, "Foobar")
        constraints = scenario.when().empty().constraint()

        assert hasattr(scenario.triggers, "nope") is False
        assert hasattr(constraints, "nope") is False
        assert getattr(scenario.triggers, "nope", None) is None
        assert hasattr(scenario.triggers, "foobar") is True

        with pytest.raises(AttributeError):
            constraints.bar()

    def test_unfinished_trigger_chain_is_not_wired(self, registry):
        """Test that resolving a trigger without calling its terminal method wires nothing."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar")

        scenario.when().foobar()
        scenario.then(callback)

        assert scenario.runnable is False
        assert scenario.trigger_count == 0
        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_failed_trigger_chain_is_not_wired(self, registry):
        """Test that a trigger chain raising at build time leaves the scenario not runnable."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar")

        with pytest.raises(TypeError):
            scenario.when().foobar("unexpected")
        with pytest.raises(TypeError):
            scenario.when().foobar().on_event()
        scenario.then(callback)

        assert scenario.runnable is False
        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_finished_trigger_chain_is_wired(self, registry):
        """Test that the terminal trigger method marks the scenario runnable."""
        scenario = Scenario(registry, "Foobar")

        chain = scenario.when().foobar()
        assert scenario.runnable is False

        assert chain.on_event("pop") is scenario.triggers
        assert scenario.runnable is True
        assert scenario.trigger_count == 1

    def test_registry_factory(self, registry):
        """Test creating scenarios through the registry."""
        scenario = registry.scenario("Foobar")

        assert isinstance(scenario, Scenario)
        assert scenario.registry is registry
        assert registry.scenarios() == [scenario]


class TestConstraints:
    """Tests for constraint groups and the else branch."""

    def test_basic_constraint_passes(self, registry):
        """Test that a met constraint runs the callback."""
        callback = Mock()
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(True)
                .then(callback)
        )

        assert scenario.assert_() is True
        assert callback.call_count == 1

    def test_basic_constraint_fails(self, registry):
        """Test that an unmet constraint skips the callback."""
        callback = Mock()
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(False)
                .then(callback)
        )

        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_chained_constraints_are_and(self, registry):
        """Test that chained predicates in one group must all hold."""
        callback = Mock()
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(True)
                .foobar().is_true(False)
                .then(callback)
        )

        assert len(scenario.groups) == 1
        assert len(scenario.groups[0].predicates) == 2
        assert scenario.assert_() is False
        callback.assert_not_called()

    def test_only_matching_group_runs(self, registry):
        """Test that only the group whose constraints hold runs."""
        callbacks = [Mock(), Mock(), Mock()]
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[0])
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[1])
            .constraint()
                .foobar().is_true(True)
                .then(callbacks[2])
        )

        assert scenario.assert_() is True
        assert [c.call_count for c in callbacks] == [0, 0, 1]

    def test_all_matching_groups_run(self, registry):
        """Test that every matching group runs, not just the first."""
        callbacks = [Mock(), Mock(), Mock()]
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[0])
            .constraint()
                .foobar().is_true(True)
                .then(callbacks[1])
            .constraint()
                .foobar().is_true(True)
                .then(callbacks[2])
        )

        assert scenario.assert_() is True
        assert [c.call_count for c in callbacks] == [0, 1, 1]

    def test_groups_run_in_declaration_order(self, registry):
        """Test that callbacks of matching groups run in declaration order."""
        calls = []
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(True)
                .then(lambda s, p: calls.append("first"))
            .constraint()
                .foobar().is_true(True)
                .then(lambda s, p: calls.append("second"))
        )

        scenario.assert_()
        assert calls == ["first", "second"]

    def test_else_runs_when_nothing_matches(self, registry):
        """Test falling back to the else branch."""
        callbacks = [Mock(), Mock(), Mock()]
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[0])
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[1])
            .else_()
                .then(callbacks[2])
        )

        assert scenario.assert_() is True
        assert [c.call_count for c in callbacks] == [0, 0, 1]

    def test_else_skipped_when_a_group_matches(self, registry):
        """Test that else never runs if any group matched."""
        callbacks = [Mock(), Mock(), Mock()]
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .foobar().is_true(False)
                .then(callbacks[0])
            .constraint()
                .foobar().is_true(True)
                .then(callbacks[1])
            .else_()
                .then(callbacks[2])
        )

        assert scenario.assert_() is True
        assert [c.call_count for c in callbacks] == [0, 1, 0]

    def test_only_one_else(self, registry):
        """Test that a second else branch is rejected."""
        scenario = Scenario(registry, "Foobar").when().empty().else_().then(Mock())

        with pytest.raises(ScenarioBuildError):
            scenario.else_()

    def test_empty_group_is_true(self, registry):
        """Test that a group without predicates always matches."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar").when().empty().constraint().then(callback)

        assert scenario.assert_() is True
        callback.assert_called_once()

    def test_predicates_are_evaluated_on_assert(self, registry):
        """Test that predicates see state at evaluation time, not build time."""
        state = {"on": False}
        callback = Mock()
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .where(lambda: state["on"])
                .then(callback)
        )

        assert scenario.assert_() is False
        state["on"] = True
        assert scenario.assert_() is True
        callback.assert_called_once()

    def test_matching_group_without_callback(self, registry):
        """Test that a matching group without callback suppresses else but fires nothing."""
        else_callback = Mock()
        scenario = Scenario(registry, "Foobar")
        scenario.when().empty()
        scenario.constraint().foobar().is_true(True)
        scenario.else_().then(else_callback)

        assert scenario.assert_() is False
        else_callback.assert_not_called()

    def test_leading_then_acts_as_always_true_group(self, registry):
        """Test a then() bound before any constraint group."""
        default, grouped, fallback = Mock(), Mock(), Mock()
        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .then(default)
            .constraint()
                .foobar().is_true(False)
                .then(grouped)
            .else_()
                .then(fallback)
        )

        assert scenario.assert_() is True
        default.assert_called_once()
        grouped.assert_not_called()
        fallback.assert_not_called()

    def test_predicate_error_propagates(self, registry):
        """Test that a failing predicate stops evaluation and reaches the caller."""
        later = Mock()

        def broken():
            raise RuntimeError("sensor unavailable")

        scenario = (
            Scenario(registry, "Foobar")
            .when()
                .empty()
            .constraint()
                .where(broken)
                .then(Mock())
            .constraint()
                .then(later)
        )

        with pytest.raises(RuntimeError, match="sensor unavailable"):
            scenario.assert_()
        later.assert_not_called()

    def test_unknown_predicate_list(self, registry):
        """Test that constraint() rejects a list that belongs to no group."""
        with pytest.raises(ScenarioBuildError):
            Scenario(registry, "Foobar").constraint([])


class TestTriggers:
    """Tests for trigger wiring."""

    def test_not_fired(self, registry):
        """Test that nothing runs if the trigger never fires."""
        callback = Mock()
        Scenario(registry, "Foobar").when().foobar().on_event("hey").then(callback)

        callback.assert_not_called()

    def test_fired(self, registry):
        """Test that firing the trigger runs the scenario."""
        callback = Mock()
        scenario = Scenario(registry, "Foobar").when().foobar().on_event("hey").then(callback)

        fire(registry, "hey")

        callback.assert_called_once_with(scenario, "hey")

    def test_custom_trigger(self, registry):
        """Test wiring a subscription by hand."""
        callback = Mock()

        def on_pop(scenario):
            scenario.registry.bus.subscribe(
                lambda event: scenario.assert_("pop"), EventFilter(event_type="pop")
            )
            return scenario.triggers

        scenario = Scenario(registry, "Foobar").when(on_pop).then(callback)
        fire(registry, "pop")

        assert scenario.runnable is True
        callback.assert_called_once_with(scenario, "pop")

    def test_two_triggers_act_as_or(self, registry):
        """Test that two triggers each fire the scenario."""
        callback = Mock()
        (
            Scenario(registry, "Foobar")
            .when()
                .foobar().on_event("foo")
                .foobar().on_event("bar")
            .then(callback)
        )

        fire(registry, "foo")
        fire(registry, "bar")
        fire(registry, "hey")

        assert callback.call_count == 2
        assert [c.args[1] for c in callback.call_args_list] == ["foo", "bar"]

    def test_callback_error_reaches_publisher(self, registry):
        """Test that a callback error propagates through the event bus."""

        def broken(scenario, payload):
            raise RuntimeError("light offline")

        Scenario(registry, "Foobar").when().foobar().on_event("hey").then(broken)

        with pytest.raises(RuntimeError, match="light offline"):
            fire(registry, "hey")

    def test_test_mode(self, registry):
        """Test that test() flags the scenario and the host."""
        scenario = Scenario(registry, "Foobar").when().empty().then(Mock()).test()

        assert scenario.test_mode is True
        assert registry.test_mode is True

    def test_test_mode_is_per_registry(self, registry):
        """Test that test mode does not leak into other registries."""
        other = ComponentRegistry(scheduler=ManualScheduler())

        Scenario(registry, "Foobar").when().empty().then(Mock()).test()

        assert other.test_mode is False
