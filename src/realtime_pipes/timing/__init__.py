"""
Time primitives for realtime-pipes.

Wall clock, time conversions and the exponential sampler behind the
Poisson stages.
"""

from .clock import WallClock, SystemClock, VirtualClock, default_clock, resolve_clock
from .conversions import (
    as_instant,
    seconds_to_duration,
    duration_to_seconds,
    offset_to_deadline,
    deadline_to_offset,
)
from .poisson import POISSON_BATCH_SIZE, uniform_to_exponential, poisson_deadlines

__all__ = [
    'WallClock', 'SystemClock', 'VirtualClock', 'default_clock', 'resolve_clock',
    'as_instant', 'seconds_to_duration', 'duration_to_seconds',
    'offset_to_deadline', 'deadline_to_offset',
    'POISSON_BATCH_SIZE', 'uniform_to_exponential', 'poisson_deadlines',
]
