"""
Wall Clock Primitive

Every pacing stage needs exactly two things from time: the current instant,
and a way to block until a deadline. Both live behind WallClock so stages
can run against the real system clock or a simulated one.

    SystemClock  - datetime.now(UTC) + time.sleep (best-effort, may overrun)
    VirtualClock - simulated time; sleep() advances the clock instantly

sleep_until() is shared: the remaining duration is computed against now()
and truncated to whole microseconds. A deadline at or before now() returns
immediately without sleeping.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .conversions import EPOCH, Instant, as_instant

logger = logging.getLogger(__name__)


class WallClock(ABC):
    """
    Interface for wall-clock time retrieval and sleeping.

    Implementations only provide now() and sleep(); deadline handling is
    common to all clocks.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        pass

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block the calling thread for `seconds` (always > 0)."""
        pass

    def sleep_until(self, deadline: Instant) -> float:
        """
        Block until `deadline`.

        Args:
            deadline: Absolute instant (datetime or POSIX seconds)

        Returns:
            Seconds actually requested from sleep(); 0.0 if the deadline
            had already passed
        """
        remaining = as_instant(deadline) - self.now()
        if remaining <= timedelta(0):
            return 0.0

        # Truncate to the microsecond, matching seconds_to_duration
        usec = remaining // timedelta(microseconds=1)
        if usec <= 0:
            return 0.0
        seconds = usec / 1_000_000

        logger.debug(f"Sleeping {seconds:.6f}s until {deadline}")
        self.sleep(seconds)
        return seconds


class SystemClock(WallClock):
    """Real wall clock backed by the operating system."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class VirtualClock(WallClock):
    """
    Simulated clock for fast replay and deterministic tests.

    Time only moves when sleep() or advance() is called. Every sleep is
    recorded in `sleeps` so callers can check the pacing a stage asked for.

    Usage:
        clock = VirtualClock(start=1_700_000_000.0)
        for event in time_cat(events, clock=clock):
            print(clock.now(), event)
    """

    def __init__(self, start: Optional[Instant] = None):
        """
        Initialize virtual clock.

        Args:
            start: Initial instant (default: the Unix epoch)
        """
        self._now = as_instant(start) if start is not None else EPOCH
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self._now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now = self._now + timedelta(seconds=seconds)

    def advance(self, seconds: float) -> datetime:
        """Move time forward without recording a sleep. Returns the new now()."""
        self._now = self._now + timedelta(seconds=seconds)
        return self._now

    def set(self, instant: Instant) -> None:
        """Jump to an absolute instant (may move backwards)."""
        self._now = as_instant(instant)

    @property
    def total_slept(self) -> float:
        """Sum of all recorded sleeps in seconds."""
        return sum(self.sleeps)


_DEFAULT_CLOCK = SystemClock()


def default_clock() -> WallClock:
    """Shared SystemClock used when a stage is not given a clock."""
    return _DEFAULT_CLOCK


def resolve_clock(clock: Optional[WallClock]) -> WallClock:
    """Return `clock`, or the default system clock when None."""
    return clock if clock is not None else _DEFAULT_CLOCK
