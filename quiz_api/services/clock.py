"""Time sources for the quiz engine.

``SystemClock`` is used in production; ``ManualClock`` lets tests move time
forward explicitly and fires due callbacks synchronously.
"""
from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A scheduled one-shot callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""


class Clock(ABC):
    """Wall-clock time source with one-shot scheduling."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""

    @abstractmethod
    def schedule(self, at: datetime, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once ``at`` has been reached."""


class _ThreadTimerHandle(TimerHandle):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class SystemClock(Clock):
    """Real time, with callbacks on daemon timer threads."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def schedule(self, at: datetime, callback: Callable[[], None]) -> TimerHandle:
        delay = max(0.0, (at - self.now()).total_seconds())
        timer = threading.Timer(delay, callback)
        timer.name = "quiz_deadline"
        timer.daemon = True
        timer.start()
        return _ThreadTimerHandle(timer)


class _ManualTimer(TimerHandle):
    def __init__(self, at: datetime, seq: int, callback: Callable[[], None]) -> None:
        self.at = at
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self._timers: list[_ManualTimer] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def schedule(self, at: datetime, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(at, next(self._seq), callback)
        with self._lock:
            self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of armed, not yet fired, timers."""
        with self._lock:
            return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward and fire every callback that became due."""
        self.set_time(self.now() + timedelta(seconds=seconds))

    def set_time(self, at: datetime) -> None:
        with self._lock:
            self._now = at
            due = sorted(
                (t for t in self._timers if not t.cancelled and t.at <= at),
                key=lambda t: (t.at, t.seq),
            )
            self._timers = [t for t in self._timers if t not in due and not t.cancelled]

        # Callbacks run outside the lock; they may schedule or read time
        for timer in due:
            if timer.cancelled:
                continue
            logger.debug("Firing manual timer due at %s", timer.at.isoformat())
            timer.callback()
