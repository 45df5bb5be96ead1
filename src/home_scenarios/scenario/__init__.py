"""
Scenario engine for home-scenarios.

Scenarios are rules built with a fluent DSL:

    when (triggers, OR) -> constraint groups (predicates, AND) -> then (callback)

with an optional else branch that runs when no constraint group matched.
"""

from .models import ConstraintGroup, GroupKind, Predicate, ScenarioCallback
from .scenario import Scenario
from .scopes import ConstraintScope, TriggerScope

__all__ = [
    "Scenario",
    "TriggerScope",
    "ConstraintScope",
    "ConstraintGroup",
    "GroupKind",
    "Predicate",
    "ScenarioCallback",
]
