"""Tests for the Variable component."""

from unittest.mock import Mock

import pytest

from home_scenarios import ComponentRegistry, EventFilter, ManualScheduler, Scenario
from home_scenarios.components.variable import VARIABLE_CHANGED, VariableComponent
from home_scenarios.core.errors import UnknownEntityError


@pytest.fixture
def registry():
    registry = ComponentRegistry(scheduler=ManualScheduler())
    registry.register(VariableComponent())
    return registry


@pytest.fixture
def variables(registry):
    return registry.component("variable")


class TestVariables:
    """Tests for variable storage."""

    def test_add_and_get(self, variables):
        """Test adding a variable and reading it back."""
        mode = variables.add("mode", "home")

        assert variables.get("mode") is mode
        assert mode.value == "home"
        assert variables.get("missing") is None

    def test_add_duplicate(self, variables):
        """Test that a duplicate variable is rejected."""
        mode = variables.add("mode", "home")

        assert variables.add("mode", "away") is None
        assert mode.value == "home"

    def test_update_publishes_on_change(self, registry, variables):
        """Test that update publishes only real changes and set is silent."""
        events = []
        registry.bus.subscribe(events.append, EventFilter(event_type=VARIABLE_CHANGED))
        mode = variables.add("mode", "home")

        mode.update("away")
        mode.update("away")
        mode.set("home")

        assert [e.payload["value"] for e in events] == ["away"]
        assert events[0].payload["previous"] == "home"
        assert mode.value == "home"


class TestVariableScenarios:
    """Tests for variable triggers and constraints."""

    def test_changes_trigger(self, registry, variables):
        """Test that any change fires the scenario."""
        mode = variables.add("mode", "home")
        callback = Mock()
        Scenario(registry, "Mode").when().variable("mode").changes().then(callback)

        mode.update("away")
        mode.update("home")

        assert callback.call_count == 2

    def test_equals_trigger(self, registry, variables):
        """Test firing only on a specific value."""
        mode = variables.add("mode", "home")
        callback = Mock()
        Scenario(registry, "Away").when().variable("mode").equals("away").then(callback)

        mode.update("night")
        mode.update("away")

        callback.assert_called_once()

    def test_constraints(self, registry, variables):
        """Test equals/is_true/is_false constraints with an else branch."""
        variables.add("mode", "away")
        alarm = variables.add("alarm", False)
        armed_cb, fallback = Mock(), Mock()
        scenario = (
            Scenario(registry, "Arm")
            .when()
                .empty()
            .constraint()
                .variable("mode").equals("away")
                .variable("alarm").is_true()
                .then(armed_cb)
            .else_()
                .then(fallback)
        )

        assert scenario.assert_() is True
        armed_cb.assert_not_called()
        fallback.assert_called_once()

        alarm.update(True)
        assert scenario.assert_() is True
        armed_cb.assert_called_once()
        assert fallback.call_count == 1

    def test_is_false_constraint(self, registry, variables):
        """Test the is_false constraint."""
        variables.add("alarm", False)
        callback = Mock()
        scenario = (
            Scenario(registry, "Disarmed")
            .when()
                .empty()
            .constraint()
                .variable("alarm").is_false()
                .then(callback)
        )

        assert scenario.assert_() is True
        callback.assert_called_once()

    def test_unknown_variable(self, registry):
        """Test that unknown variables fail at build time."""
        with pytest.raises(UnknownEntityError):
            Scenario(registry, "Mode").when().variable("mode").changes()
