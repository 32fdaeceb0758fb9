from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable


# PUBLIC_INTERFACE
class ScheduledCall(ABC):
    """Handle for a deferred callback armed through a Scheduler."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Cancelling twice, or after it ran, is a no-op."""


# PUBLIC_INTERFACE
class Scheduler(ABC):
    """
    Explicit schedule/cancel pair used for debounced writes and message expiry.

    Implementations must run each callback at most once, no earlier than
    `delay_ms` after it was armed, and never after it was cancelled.
    """

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        """Arm `callback` to run after `delay_ms` milliseconds and return its handle."""


class _TimerCall(ScheduledCall):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler(Scheduler):
    """
    Wall-clock scheduler backed by daemon `threading.Timer` threads.

    Callbacks run on the timer thread; callers guard shared state with their own locks.
    """

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(max(delay_ms, 0) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)
