"""
Unit tests for the wall clock primitive.

Tests sleep_until() deadline handling on the virtual clock and basic
behaviour of the system clock.
"""

import pytest
import time
from datetime import datetime, timedelta, timezone


class TestSleepUntil:
    """Test deadline sleeping against the virtual clock."""

    def test_future_deadline_sleeps_remaining(self, clock, at):
        slept = clock.sleep_until(at(2.5))

        assert slept == 2.5
        assert clock.sleeps == [2.5]
        assert clock.now() == at(2.5)

    def test_past_deadline_is_noop(self, clock, at):
        slept = clock.sleep_until(at(-1))

        assert slept == 0.0
        assert clock.sleeps == []
        assert clock.now() == at(0)

    def test_deadline_equal_to_now_is_noop(self, clock, at):
        assert clock.sleep_until(at(0)) == 0.0
        assert clock.sleeps == []

    def test_microsecond_deadline(self, clock, start):
        """The smallest representable remaining time is still slept."""
        clock.sleep_until(start + timedelta(microseconds=3))

        assert clock.now() == start + timedelta(microseconds=3)

    def test_posix_deadline_accepted(self, clock, start):
        deadline = start.timestamp() + 1
        clock.sleep_until(deadline)

        assert clock.now() == start + timedelta(seconds=1)


class TestVirtualClock:
    """Test virtual clock bookkeeping."""

    def test_defaults_to_epoch(self):
        from realtime_pipes.timing.clock import VirtualClock
        from realtime_pipes.timing.conversions import EPOCH

        assert VirtualClock().now() == EPOCH

    def test_advance_does_not_record_sleep(self, clock, at):
        assert clock.advance(3) == at(3)
        assert clock.sleeps == []

    def test_set_jumps_to_instant(self, clock, at):
        clock.set(at(-10))
        assert clock.now() == at(-10)

    def test_total_slept(self, clock, at):
        clock.sleep_until(at(1))
        clock.sleep_until(at(1.5))

        assert clock.total_slept == pytest.approx(1.5)


class TestSystemClock:
    """Test the real clock (timing tolerances are generous)."""

    def test_now_is_aware_utc(self):
        from realtime_pipes.timing.clock import SystemClock

        now = SystemClock().now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_past_deadline_returns_immediately(self):
        from realtime_pipes.timing.clock import SystemClock

        clock = SystemClock()
        t_start = time.monotonic()
        slept = clock.sleep_until(clock.now() - timedelta(seconds=5))

        assert slept == 0.0
        assert time.monotonic() - t_start < 0.05

    def test_future_deadline_blocks(self):
        from realtime_pipes.timing.clock import SystemClock

        clock = SystemClock()
        deadline = clock.now() + timedelta(milliseconds=50)
        clock.sleep_until(deadline)

        assert clock.now() >= deadline - timedelta(milliseconds=1)

    def test_default_clock_is_system_clock(self):
        from realtime_pipes.timing.clock import SystemClock, default_clock, resolve_clock

        assert isinstance(default_clock(), SystemClock)
        assert resolve_clock(None) is default_clock()

    def test_resolve_clock_keeps_given_clock(self, clock):
        from realtime_pipes.timing.clock import resolve_clock

        assert resolve_clock(clock) is clock
