"""
Clock
=====

Time source abstraction for the control loop.

Every component that reads wall-clock time or sleeps goes through a
Clock. Production code uses SystemClock; tests and simulations use
ManualClock, whose ``sleep`` advances virtual time instantly.

Example:
    from datetime import datetime
    from aquatic_monitor.core.clock import ManualClock

    clock = ManualClock(datetime(2024, 6, 1, 2, 0, 0))
    clock.sleep(600)
    print(clock.now())  # 2024-06-01 02:10:00
"""

import threading
import time
from datetime import datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    """Protocol for time sources."""

    def now(self) -> datetime:
        """Current local wall-clock time."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block (or pretend to block) for the given number of seconds."""
        ...


class SystemClock:
    """Real wall-clock time backed by the ``time`` and ``datetime`` modules."""

    def now(self) -> datetime:
        return datetime.now()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class ManualClock:
    """
    Deterministic clock for tests and accelerated simulation.

    ``sleep`` returns immediately after moving the clock forward, so a
    control loop driven by this clock runs as fast as the CPU allows
    while still observing correct elapsed times.

    Attributes:
        sleep_calls: Number of times sleep() was called
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or datetime(2024, 6, 1, 12, 0, 0)
        self._lock = threading.Lock()
        self.sleep_calls: int = 0

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleep_calls += 1
            if seconds > 0:
                self._now += timedelta(seconds=seconds)

    def advance(self, seconds: float = 0.0, minutes: float = 0.0, hours: float = 0.0) -> datetime:
        """Move the clock forward and return the new time."""
        with self._lock:
            self._now += timedelta(seconds=seconds, minutes=minutes, hours=hours)
            return self._now

    def set(self, when: datetime) -> None:
        """Jump to an absolute time."""
        with self._lock:
            self._now = when
