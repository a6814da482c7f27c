"""
realtime-pipes: Real-time pacing stages for Python iterators

This package provides composable generator stages that release elements
according to time - timestamps carried by the elements, a constant rate,
a Poisson arrival process, or an explicit schedule of deadlines. A stream
of recorded or ordered data can be replayed at realistic or synthetic
real-time pacing, e.g. to simulate sensor feeds or rate-limit test traffic.

Architecture:
    upstream iterable → stage (sleep until due) → downstream consumer

    events = pipe(recorded_events, time_cat)
    for event in events:
        handle(event)          # arrives at event.time_of()

Sleeps are best-effort: nothing here guarantees hard real-time deadlines.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .interfaces.events import TimedEvent, TMinus
from .timing.clock import WallClock, SystemClock, VirtualClock
from .stages import (
    cat,
    drop_result,
    then,
    pipe,
    time_cat,
    relative_time_cat,
    drop_expired,
    drop_relative_expired,
    steady_cat,
    poisson_cat,
    gen_poisson_cat,
    cat_at_times,
    cat_at_relative_times,
)

__all__ = [
    "TimedEvent",
    "TMinus",
    "WallClock",
    "SystemClock",
    "VirtualClock",
    "cat",
    "drop_result",
    "then",
    "pipe",
    "time_cat",
    "relative_time_cat",
    "drop_expired",
    "drop_relative_expired",
    "steady_cat",
    "poisson_cat",
    "gen_poisson_cat",
    "cat_at_times",
    "cat_at_relative_times",
    "__version__",
]
