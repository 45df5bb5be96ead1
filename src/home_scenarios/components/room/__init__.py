"""
Room component for home-scenarios.

Tracks per-room occupancy from sensor readings with a debounced vacancy
check, and exposes "room" triggers and constraints to scenarios.
"""

from .component import ROOM_CHANGED, RoomComponent, RoomConstraint, RoomTrigger
from .room import DEFAULT_THRESHOLD_DURATION, Room, default_attributes

__all__ = [
    "RoomComponent",
    "RoomTrigger",
    "RoomConstraint",
    "Room",
    "ROOM_CHANGED",
    "DEFAULT_THRESHOLD_DURATION",
    "default_attributes",
]
