"""
Event component for home-scenarios: named custom events usable as triggers.
"""

from .component import EVENT_FIRED, EventComponent, EventTrigger

__all__ = ["EventComponent", "EventTrigger", "EVENT_FIRED"]
