"""
Change-detecting attribute store.

Every entity (room, variable) keeps its state in an AttributeStore. Writes
through update() notify the owner only when the value actually changes.
"""

import logging
from typing import Any, Callable, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

# (key, new_value, previous_value); previous_value is None for new keys
ChangeCallback = Callable[[str, Any, Any], None]


class AttributeStore:
    """
    Key/value store for a single entity.

    set() writes silently. update() writes and calls on_change, but only
    when the key is new or the stored value differs from the new one.
    get() returns None for missing keys.
    """

    def __init__(
        self,
        owner: str,
        on_change: Optional[ChangeCallback] = None,
        initial: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            owner: Name of the owning entity (used in log messages)
            on_change: Called synchronously for every recorded change
            initial: Values seeded with set() semantics
        """
        self._owner = owner
        self._on_change = on_change
        self._values: Dict[str, Any] = {}

        for key, value in (initial or {}).items():
            self.set(key, value)

    @property
    def owner(self) -> str:
        return self._owner

    def set(self, key: str, value: Any) -> bool:
        """Write a value without notifying anyone."""
        self._values[key] = value
        return True

    def update(self, key: str, value: Any) -> bool:
        """
        Write a value and notify the owner if it changed.

        Args:
            key: Attribute name
            value: New value

        Returns:
            True if the value changed (and a notification was sent)
        """
        if key in self._values and self._values[key] == value:
            return False

        previous = self._values.get(key)
        self._values[key] = value
        logger.debug(f"{self._owner}: {key} {previous!r} -> {value!r}")

        if self._on_change:
            self._on_change(key, value, previous)
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or default (None) if the key was never written."""
        return self._values.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Copy of all stored values."""
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
