"""
Cancellable delayed tasks.

Components that need to act later (e.g., the room vacancy check) ask the
registry's Scheduler for a ScheduledTask and keep the handle so they can
cancel it.

Two implementations are provided:
- ThreadingScheduler: real timers on background threads (default)
- ManualScheduler: a virtual clock advanced explicitly (tests, simulations)
"""

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

TaskCallback = Callable[[], None]


class ScheduledTask:
    """
    Handle for a callback scheduled to run once after a delay.

    cancel() is synchronous: once it returns the callback will not be
    started by this task.
    """

    def __init__(self, callback: TaskCallback, due: float, name: str = "") -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._cancelled = False
        self._done = False
        self.due = due
        self.name = name

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> bool:
        """
        Cancel the task.

        Returns:
            True if the task was still pending
        """
        with self._lock:
            if self._cancelled or self._done:
                return False
            self._cancelled = True
        logger.debug(f"Cancelled task {self.name or self._callback!r}")
        return True

    def run(self) -> bool:
        """
        Run the callback unless the task was cancelled or already ran.

        Returns:
            True if the callback was invoked
        """
        with self._lock:
            if self._cancelled or self._done:
                return False
            self._done = True
        self._callback()
        return True


class Scheduler(ABC):
    """Abstract source of time and delayed execution."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds (monotonic, arbitrary origin)."""
        pass

    @abstractmethod
    def schedule(self, delay: float, callback: TaskCallback, name: str = "") -> ScheduledTask:
        """
        Schedule callback to run once after delay seconds.

        Args:
            delay: Seconds to wait (negative values are treated as 0)
            callback: Zero-argument callable
            name: Optional label for logging

        Returns:
            Handle that can be used to cancel the task
        """
        pass


class _TimerTask(ScheduledTask):
    """ScheduledTask backed by a threading.Timer."""

    def __init__(self, callback: TaskCallback, due: float, delay: float, name: str) -> None:
        super().__init__(callback, due, name)
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def start(self) -> None:
        self._timer.start()

    def _fire(self) -> None:
        try:
            self.run()
        except Exception as e:
            # Nobody is waiting on a timer thread; report and drop
            logger.error(f"Error in scheduled task {self.name}: {e}", exc_info=True)

    def cancel(self) -> bool:
        cancelled = super().cancel()
        self._timer.cancel()
        return cancelled


class ThreadingScheduler(Scheduler):
    """Scheduler running callbacks on threading.Timer threads."""

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, callback: TaskCallback, name: str = "") -> ScheduledTask:
        delay = max(0.0, delay)
        task = _TimerTask(callback, self.now() + delay, delay, name)
        task.start()
        logger.debug(f"Scheduled task {name} in {delay}s")
        return task


class ManualScheduler(Scheduler):
    """
    Scheduler with a virtual clock.

    Nothing runs until advance() (or run_pending()) is called, which makes
    timer-driven behavior deterministic in tests.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule(self, delay: float, callback: TaskCallback, name: str = "") -> ScheduledTask:
        task = ScheduledTask(callback, self._now + max(0.0, delay), name)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        logger.debug(f"Scheduled task {name} at t={task.due}")
        return task

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every task that becomes due.

        Tasks run in due order with the clock set to their due time.

        Args:
            seconds: How far to move the clock

        Returns:
            Number of callbacks invoked
        """
        target = self._now + seconds
        ran = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if task.run():
                ran += 1

        self._now = target
        return ran

    def run_pending(self) -> int:
        """Run tasks already due at the current time."""
        return self.advance(0)

    def pending_tasks(self) -> List[ScheduledTask]:
        """Tasks that are neither cancelled nor done, in due order."""
        return [task for _, _, task in sorted(self._queue) if task.pending]

    def next_due(self) -> Optional[float]:
        """When the next pending task is due, or None."""
        pending = self.pending_tasks()
        return pending[0].due if pending else None
