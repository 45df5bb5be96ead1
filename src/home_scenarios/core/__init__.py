"""
Core components of home-scenarios.

This package contains:
- attributes: change-detecting AttributeStore
- bus: Event Bus implementation
- config: default configuration and logging setup
- errors: build-time exceptions
- registry: ComponentRegistry (the scenario host)
- scheduler: cancellable delayed tasks
"""

from home_scenarios.core.attributes import AttributeStore
from home_scenarios.core.bus import Event, EventBus, EventFilter
from home_scenarios.core.config import DEFAULT_CONFIG, configure_logging, load_config
from home_scenarios.core.errors import (
    ScenarioBuildError,
    UnknownComponentError,
    UnknownConstraintError,
    UnknownEntityError,
    UnknownTriggerError,
)
from home_scenarios.core.registry import ComponentRegistry
from home_scenarios.core.scheduler import (
    ManualScheduler,
    ScheduledTask,
    Scheduler,
    ThreadingScheduler,
)

__all__ = [
    "AttributeStore",
    "Event",
    "EventBus",
    "EventFilter",
    "DEFAULT_CONFIG",
    "configure_logging",
    "load_config",
    "ScenarioBuildError",
    "UnknownComponentError",
    "UnknownConstraintError",
    "UnknownEntityError",
    "UnknownTriggerError",
    "ComponentRegistry",
    "ManualScheduler",
    "ScheduledTask",
    "Scheduler",
    "ThreadingScheduler",
]
