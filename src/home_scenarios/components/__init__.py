"""
Components package for home-scenarios.

Components are plug-ins that own entities and offer triggers and
constraints to the scenario DSL.
"""

from typing import Dict, Type

from home_scenarios.components.base import Component
from home_scenarios.components.event import EventComponent
from home_scenarios.components.room import RoomComponent
from home_scenarios.components.variable import VariableComponent

# Component types by configuration name
COMPONENT_TYPES: Dict[str, Type[Component]] = {
    "event": EventComponent,
    "room": RoomComponent,
    "variable": VariableComponent,
}

__all__ = [
    "Component",
    "EventComponent",
    "RoomComponent",
    "VariableComponent",
    "COMPONENT_TYPES",
]
