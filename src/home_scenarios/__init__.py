"""
home-scenarios: a home-automation rule engine.

This library provides:
- A fluent Scenario DSL (when -> constraint groups -> then / else)
- A ComponentRegistry hosting pluggable components
- Room occupancy tracking with debounced vacancy detection
- A synchronous Event Bus shared by all components
"""

from home_scenarios.core.attributes import AttributeStore
from home_scenarios.core.bus import Event, EventBus, EventFilter
from home_scenarios.core.registry import ComponentRegistry
from home_scenarios.core.scheduler import ManualScheduler, ThreadingScheduler
from home_scenarios.scenario import Scenario

__version__ = "0.1.0"

__all__ = [
    "AttributeStore",
    "Event",
    "EventBus",
    "EventFilter",
    "ComponentRegistry",
    "ManualScheduler",
    "ThreadingScheduler",
    "Scenario",
]
