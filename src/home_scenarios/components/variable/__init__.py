"""
Variable component for home-scenarios: named values usable in triggers and constraints.
"""

from .component import (
    VARIABLE_CHANGED,
    Variable,
    VariableComponent,
    VariableConstraint,
    VariableTrigger,
)

__all__ = [
    "VariableComponent",
    "Variable",
    "VariableTrigger",
    "VariableConstraint",
    "VARIABLE_CHANGED",
]
