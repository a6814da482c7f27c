"""
Pytest configuration and fixtures for realtime-pipes tests.
"""

import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Tick:
    """Element with an absolute timestamp (TimedEvent by structure)."""

    def __init__(self, name, when):
        self.name = name
        self.when = when

    def time_of(self):
        return self.when

    def __repr__(self):
        return f"Tick({self.name!r})"


class Countdown:
    """Element with a relative offset (TMinus by structure)."""

    def __init__(self, name, offset):
        self.name = name
        self.offset = offset

    def t_minus_sec(self):
        return self.offset

    def __repr__(self):
        return f"Countdown({self.name!r})"


@pytest.fixture
def start():
    """Fixed start instant for the virtual clock."""
    return START


@pytest.fixture
def clock():
    """Virtual clock starting at START."""
    from realtime_pipes.timing.clock import VirtualClock
    return VirtualClock(start=START)


@pytest.fixture
def at(start):
    """Build an instant `seconds` after START."""
    def _at(seconds):
        return start + timedelta(seconds=seconds)
    return _at


@pytest.fixture
def tick():
    return Tick


@pytest.fixture
def countdown():
    return Countdown


@pytest.fixture
def record_emissions(clock):
    """Drain a stage, recording (clock.now(), element) for every emission."""
    def _record(stage):
        return [(clock.now(), value) for value in stage]
    return _record


@pytest.fixture
def drain():
    """Drain a generator and return (items, completion value)."""
    def _drain(gen):
        items = []
        while True:
            try:
                items.append(next(gen))
            except StopIteration as stop:
                return items, stop.value
    return _drain
