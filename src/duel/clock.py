"""
Per-turn countdown.

The TurnClock is the only component that schedules asynchronous work. Scheduling goes through a Scheduler,
so the real thing (threading.Timer) can be swapped for a deterministic fake in tests.

Every start() opens a new generation. A scheduled callback carries the generation it was armed for,
which acts as its cancellation token: callbacks of an older generation are ignored.
Together with the state check this makes on_expire fire at most once per start(), whatever the scheduler does.
"""

import logging
import threading
import time
from typing import Callable, Optional, Protocol

from src.core.exceptions import TimerError
from src.core.shared_types import ClockState

logger = logging.getLogger(__name__)

# Early wake-ups smaller than this are treated as on time (float arithmetic on the remainder)
EPSILON = 1e-6

ExpiryCallback = Callable[[], None]


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Time source + 'call me back after `delay` seconds'."""

    def now(self) -> float: ...

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class ThreadingScheduler:
    """Default scheduler: one daemon threading.Timer per countdown."""

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class TurnClock:
    """
    States and transitions
    ----

    idle -> running (start), running -> paused (pause), paused -> running (resume),
    running -> expired (time elapses), running / paused -> canceled (cancel).

    expired and canceled are terminal for the current countdown. A new start() begins a fresh one
    (from any state; a countdown still running gets replaced).
    """

    def __init__(self, scheduler: Optional[Scheduler] = None) -> None:
        self.scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.Lock()
        self._state = ClockState.IDLE
        self._generation = 0
        self._duration = 0.0
        self._remaining = 0.0  # remaining time at the moment the countdown was (re)armed
        self._armed_at = 0.0
        self._task: Optional[ScheduledTask] = None
        self._on_expire: Optional[ExpiryCallback] = None

    # --- PUBLIC API ---
    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def duration(self) -> float:
        return self._duration

    def start(self, duration: float, on_expire: ExpiryCallback) -> None:
        if duration <= 0:
            raise TimerError(f"Turn duration must be positive, got {duration}.")
        with self._lock:
            self._drop_task()
            self._generation += 1
            self._duration = duration
            self._remaining = duration
            self._on_expire = on_expire
            self._state = ClockState.RUNNING
            self._arm()

    def pause(self) -> None:
        """Keep the remaining time; the countdown stops until resume()."""
        with self._lock:
            if self._state != ClockState.RUNNING:
                raise TimerError(f"Can only pause a running clock. state: {self._state}")
            self._remaining = self._time_left()
            self._drop_task()
            self._state = ClockState.PAUSED

    def resume(self) -> None:
        """Continue from the preserved remainder (does NOT restart the full duration)."""
        with self._lock:
            if self._state != ClockState.PAUSED:
                raise TimerError(f"Can only resume a paused clock. state: {self._state}")
            self._state = ClockState.RUNNING
            self._arm()

    def cancel(self) -> None:
        """No-op unless running or paused."""
        with self._lock:
            if self._state not in (ClockState.RUNNING, ClockState.PAUSED):
                return
            self._drop_task()
            self._state = ClockState.CANCELED

    def remaining(self) -> float:
        """Seconds left on the current countdown (0 when not running / paused)."""
        with self._lock:
            if self._state == ClockState.RUNNING:
                return self._time_left()
            if self._state == ClockState.PAUSED:
                return self._remaining
            return 0.0

    # -- PRIVATE HELPERS ---
    def _arm(self) -> None:
        """Schedule a callback for the current generation. Caller holds the lock."""
        generation = self._generation
        self._armed_at = self.scheduler.now()
        self._task = self.scheduler.schedule(
            self._remaining, lambda: self._on_timer(generation)
        )

    def _drop_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _time_left(self) -> float:
        elapsed = self.scheduler.now() - self._armed_at
        return max(0.0, self._remaining - elapsed)

    def _on_timer(self, generation: int) -> None:
        """Scheduler callback. Decides under the lock, notifies outside of it."""
        with self._lock:
            if generation != self._generation or self._state != ClockState.RUNNING:
                return

            left = self._time_left()
            if left > EPSILON:
                # woke up early: wait for the rest
                self._remaining = left
                self._arm()
                return

            self._state = ClockState.EXPIRED
            self._task = None
            callback = self._on_expire
            self._on_expire = None

        logger.debug("Turn clock expired after %ss", self._duration)
        if callback is not None:
            callback()
