"""
Cancellable countdown timer for exam-mode sessions.

The timer keeps a monotonic deadline and a cancellation token. Every callback
is guarded by the controller lock and the token, so once ``cancel()`` has
returned no tick or expiry callback will run, even one that was already due.

States: IDLE -> RUNNING -> EXPIRED | CANCELLED
"""

from __future__ import annotations

import logging
import math
import threading
import time
from enum import Enum
from typing import Callable, Optional

from ..config import config
from ..errors import StateError

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class TimerController:
    """
    Countdown clock producing one tick per interval and a single expiry.

    Usage:
        timer = TimerController()
        timer.start(600, on_tick=show_remaining, on_expire=auto_submit)
        ...
        timer.cancel()

    With ``threaded=False`` no worker thread is started and the owner drives
    the timer by calling :meth:`poll` (one tick per call).
    """

    def __init__(
        self,
        interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        threaded: bool = True,
    ):
        """
        Initialize timer.

        Args:
            interval: Seconds between ticks (default: config.quiz.tick_interval_seconds)
            clock: Monotonic clock function
            threaded: Run ticks on a daemon worker thread
        """
        self.interval = interval or config.quiz.tick_interval_seconds
        self.clock = clock
        self.threaded = threaded

        self._lock = threading.RLock()
        self._cancelled = threading.Event()
        self._state = TimerState.IDLE
        self._duration: Optional[int] = None
        self._started_at: Optional[float] = None
        self._deadline: Optional[float] = None
        self._on_tick: Optional[TickCallback] = None
        self._on_expire: Optional[ExpireCallback] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is TimerState.RUNNING

    @property
    def duration_seconds(self) -> Optional[int]:
        return self._duration

    def start(
        self,
        duration_seconds: int,
        on_tick: TickCallback,
        on_expire: ExpireCallback,
    ) -> None:
        """
        Start the countdown.

        Raises:
            StateError: If the timer has already been started
            ValueError: If the duration is not positive
        """
        with self._lock:
            if self._state is not TimerState.IDLE:
                raise StateError(f"Timer cannot start from state {self._state.value}")
            if duration_seconds <= 0:
                raise ValueError(f"Timer duration must be > 0, got {duration_seconds}")

            self._duration = int(duration_seconds)
            self._started_at = self.clock()
            self._deadline = self._started_at + self._duration
            self._on_tick = on_tick
            self._on_expire = on_expire
            self._state = TimerState.RUNNING

            if self.threaded:
                self._thread = threading.Thread(
                    target=self._run, name="quiz-timer", daemon=True
                )
                self._thread.start()

        logger.debug("Timer started for %ds", self._duration)

    def cancel(self) -> None:
        """
        Stop the countdown. No callback runs after this returns.

        Raises:
            StateError: If the timer is not running
        """
        if not self.cancel_if_running():
            raise StateError(f"Timer cannot be cancelled from state {self._state.value}")

    def cancel_if_running(self) -> bool:
        """Cancel if running; return whether this call cancelled the timer."""
        with self._lock:
            if self._state is not TimerState.RUNNING:
                return False
            self._cancelled.set()
            self._state = TimerState.CANCELLED
        logger.debug("Timer cancelled with %ss remaining", self.remaining_seconds())
        return True

    def remaining_seconds(self) -> Optional[int]:
        """Whole seconds left (rounded up); None before start."""
        if self._deadline is None:
            return None
        if self._state is TimerState.EXPIRED:
            return 0
        # Round to the millisecond first so a wake-up a hair early
        # does not report the previous second again
        return max(0, math.ceil(round(self._deadline - self.clock(), 3)))

    def elapsed_seconds(self) -> Optional[int]:
        """Seconds used so far; None before start."""
        if self._duration is None:
            return None
        return self._duration - (self.remaining_seconds() or 0)

    def poll(self) -> None:
        """Emit one tick (or the expiry) for the current clock reading."""
        self._fire()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        ticks = 0
        while True:
            ticks += 1
            next_at = self._started_at + ticks * self.interval
            if self._cancelled.wait(max(0.0, next_at - self.clock())):
                return
            self._fire()
            if self._state is not TimerState.RUNNING:
                return

    def _fire(self) -> None:
        expire: Optional[ExpireCallback] = None
        with self._lock:
            if self._cancelled.is_set() or self._state is not TimerState.RUNNING:
                return
            remaining = self.remaining_seconds()
            if remaining > 0:
                # Held under the lock so cancel() cannot return mid-tick
                self._on_tick(remaining)
                return
            self._state = TimerState.EXPIRED
            expire = self._on_expire

        # State is EXPIRED, so cancel() can no longer succeed and the
        # callback runs at most once
        logger.debug("Timer expired after %ds", self._duration)
        expire()


def format_time(seconds: Optional[int]) -> str:
    """
    Format seconds as m:ss, or "∞" when there is no limit.

    Example:
        >>> format_time(125)
        '2:05'
    """
    if not seconds:
        return "∞"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"
