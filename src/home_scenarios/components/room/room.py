"""Room entity with debounced occupancy tracking.

A positive sensor reading marks the room occupied immediately. A negative
reading only starts a vacancy check that runs threshold_duration seconds
later; any positive reading in between cancels it. This keeps occupancy from
flapping when a motion sensor briefly loses sight of someone.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from home_scenarios.core.attributes import AttributeStore, ChangeCallback
from home_scenarios.core.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_DURATION = 15  # seconds

# Accepted spellings for attribute overrides
_ATTRIBUTE_ALIASES = {
    "thresholdDuration": "threshold_duration",
}


def default_attributes(threshold_duration: float = DEFAULT_THRESHOLD_DURATION) -> Dict[str, Any]:
    """Attributes every new room starts with."""
    return {"occupied": False, "threshold_duration": threshold_duration}


def normalize_attributes(attributes: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Map alias keys (e.g., thresholdDuration) to their canonical names."""
    return {_ATTRIBUTE_ALIASES.get(key, key): value for key, value in (attributes or {}).items()}


class Room:
    """A room and its occupancy state machine (VACANT <-> OCCUPIED).

    Transitions are decided under the room lock; the resulting change events
    are published after the lock is released.

    Attributes:
        name: Unique room name within its component
        attributes: The room's AttributeStore ("occupied", "threshold_duration", ...)
    """

    def __init__(
        self,
        name: str,
        scheduler: Scheduler,
        on_change: Optional[ChangeCallback] = None,
        attributes: Optional[Dict[str, Any]] = None,
        threshold_duration: float = DEFAULT_THRESHOLD_DURATION,
    ) -> None:
        """Initialize a room.

        Args:
            name: Room name.
            scheduler: Source of time and delayed vacancy checks.
            on_change: Called for every attribute change (key, value, previous).
            attributes: Overrides merged onto the default attributes.
            threshold_duration: Default debounce delay when not overridden.
        """
        self.name = name
        self._scheduler = scheduler
        self._on_change = on_change
        self._lock = threading.RLock()
        self._local = threading.local()
        self._pending_check: Optional[ScheduledTask] = None
        self._last_reading: Optional[bool] = None
        self._last_reading_at: Optional[float] = None

        seeded = {**default_attributes(threshold_duration), **normalize_attributes(attributes)}
        self.attributes = AttributeStore(name, self._record_change, seeded)

    def __repr__(self) -> str:
        state = "OCCUPIED" if self.is_occupied() else "VACANT"
        return f"Room({self.name!r}, {state})"

    @property
    def threshold_duration(self) -> float:
        """Debounce delay in seconds; negative values count as 0."""
        value = self.attributes.get("threshold_duration") or 0
        return max(0.0, float(value))

    @property
    def pending_check(self) -> Optional[ScheduledTask]:
        """The scheduled vacancy check, if one is waiting."""
        task = self._pending_check
        return task if task is not None and task.pending else None

    def is_occupied(self) -> bool:
        return self.attributes.get("occupied") is True

    def update_occupancy_by_sensor(self, detected: bool) -> None:
        """Feed a sensor reading.

        Args:
            detected: True if the sensor currently sees someone.
        """
        with self._transition():
            self._last_reading = bool(detected)
            self._last_reading_at = self._scheduler.now()
            self.cancel_pending_check()

            if detected:
                if self.attributes.update("occupied", True):
                    logger.info(f"Room {self.name} is now OCCUPIED")
                return

            threshold = self.threshold_duration
            if threshold <= 0:
                self.check_if_vacant()
                return

            self._schedule_check(threshold)

    def check_if_vacant(self) -> bool:
        """Mark the room vacant if the latest reading is still negative.

        The room only becomes vacant once threshold_duration seconds have
        passed since that reading. Calling this early, after a positive
        reading, or repeatedly changes nothing.

        Returns:
            True if the room is vacant afterwards.
        """
        with self._transition():
            remaining = self._remaining_negative_time()
            if remaining is None:
                return not self.is_occupied()

            if remaining > 0:
                logger.debug(f"Room {self.name}: {remaining:.1f}s left before vacancy")
                return not self.is_occupied()

            if self.attributes.update("occupied", False):
                logger.info(f"Room {self.name} is now VACANT")
            return True

    def cancel_pending_check(self) -> bool:
        """Cancel the scheduled vacancy check.

        Returns:
            True if a pending check was cancelled.
        """
        with self._lock:
            task, self._pending_check = self._pending_check, None
            return task.cancel() if task is not None else False

    def _remaining_negative_time(self) -> Optional[float]:
        """Seconds until the latest negative reading counts, or None if it is not negative."""
        if self._last_reading is not False or self._last_reading_at is None:
            return None
        elapsed = self._scheduler.now() - self._last_reading_at
        return self.threshold_duration - elapsed

    def _schedule_check(self, delay: float) -> None:
        self._pending_check = self._scheduler.schedule(
            delay, self._run_scheduled_check, name=f"vacancy-check:{self.name}"
        )
        logger.debug(f"Room {self.name}: vacancy check in {delay}s")

    def _run_scheduled_check(self) -> None:
        with self._transition():
            if self._pending_check is not None and not self._pending_check.pending:
                self._pending_check = None
            if self.check_if_vacant():
                return

            # Threshold raised after scheduling, or the timer fired early
            remaining = self._remaining_negative_time()
            if remaining is not None and remaining > 0 and self._pending_check is None:
                self._schedule_check(remaining)

    @contextmanager
    def _transition(self) -> Iterator[None]:
        """Hold the room lock, deferring change events until it is released."""
        outermost = getattr(self._local, "deferred", None) is None
        if outermost:
            self._local.deferred = []
        try:
            with self._lock:
                yield
        finally:
            if outermost:
                deferred, self._local.deferred = self._local.deferred, None
        if outermost:
            for change in deferred:
                self._publish(*change)

    def _record_change(self, key: str, value: Any, previous: Any) -> None:
        deferred = getattr(self._local, "deferred", None)
        if deferred is not None:
            deferred.append((key, value, previous))
        else:
            self._publish(key, value, previous)

    def _publish(self, key: str, value: Any, previous: Any) -> None:
        if self._on_change:
            self._on_change(key, value, previous)
