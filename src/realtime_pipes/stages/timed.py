"""
Self-Timed Stages

Stages paced by timing information carried in the elements themselves:

    time_cat              - emit each element at its absolute time_of()
    relative_time_cat     - emit each element t_minus_sec() after activation
    drop_expired          - discard leading elements whose time_of() is past
    drop_relative_expired - discard leading elements with t_minus_sec() < 0

Elements are expected in ascending time order. Out-of-order elements are
not reordered: their deadline has already passed, so they go out as soon
as they are received.

NOTE on the drop stages: they stop at the first element that is NOT
expired, and that element is consumed without being emitted. Sequencing
them in front of another stage therefore loses exactly one element:

    then(drop_result(drop_expired), time_cat)   # first live element lost
"""

import logging
from typing import Any, Generator, Iterable, Optional

from ..interfaces.events import OffsetKey, TimeKey, t_minus_sec, time_of
from ..timing.clock import WallClock, resolve_clock
from ..timing.conversions import offset_to_deadline
from .compose import Upstream

logger = logging.getLogger(__name__)


def time_cat(
    upstream: Iterable[Any],
    *,
    clock: Optional[WallClock] = None,
    key: Optional[TimeKey] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements at the absolute times given by their timestamps.

    Elements whose timestamp is already past are yielded immediately.

    Args:
        upstream: TimedEvent elements in ascending time order
        clock: Clock to read and sleep on (default: system clock)
        key: Optional callable returning an element's timestamp, used
            instead of its time_of() method

    Returns:
        The upstream's completion value once it is exhausted
    """
    clock = resolve_clock(clock)
    source = Upstream.wrap(upstream)
    for value in source:
        clock.sleep_until(time_of(value, key))
        yield value
    return source.result


def relative_time_cat(
    upstream: Iterable[Any],
    *,
    clock: Optional[WallClock] = None,
    key: Optional[OffsetKey] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements some time after the stage starts, according to their
    relative timestamps.

    The start instant t0 is read once, when the stage is first pulled,
    and every element is released at t0 + t_minus_sec(element).

    Args:
        upstream: TMinus elements in ascending offset order
        clock: Clock to read and sleep on (default: system clock)
        key: Optional callable returning an element's offset in seconds

    Returns:
        The upstream's completion value once it is exhausted
    """
    clock = resolve_clock(clock)
    t0 = clock.now()
    source = Upstream.wrap(upstream)
    for value in source:
        clock.sleep_until(offset_to_deadline(t0, t_minus_sec(value, key)))
        yield value
    return source.result


def drop_expired(
    upstream: Iterable[Any],
    *,
    clock: Optional[WallClock] = None,
    key: Optional[TimeKey] = None
) -> Generator[Any, None, None]:
    """
    Discard events whose timestamps are earlier than now.

    Receives elements until one is found whose timestamp is not in the
    past. That element is consumed and NOT emitted, and the stage ends.
    Nothing is ever yielded.

    Args:
        upstream: TimedEvent elements
        clock: Clock to compare against (default: system clock)
        key: Optional callable returning an element's timestamp
    """
    clock = resolve_clock(clock)
    source = Upstream.wrap(upstream)
    dropped = 0
    for value in source:
        if clock.now() > time_of(value, key):
            dropped += 1
            continue
        break
    logger.debug(f"drop_expired: discarded {dropped} expired element(s)")
    yield from ()  # never emits


def drop_relative_expired(
    upstream: Iterable[Any],
    *,
    key: Optional[OffsetKey] = None
) -> Generator[Any, None, None]:
    """
    Discard events whose relative timestamps are less than 0.

    Same contract as drop_expired: the first element with a non-negative
    offset is consumed without being emitted, and the stage ends.

    Args:
        upstream: TMinus elements
        key: Optional callable returning an element's offset in seconds
    """
    source = Upstream.wrap(upstream)
    dropped = 0
    for value in source:
        if t_minus_sec(value, key) < 0:
            dropped += 1
            continue
        break
    logger.debug(f"drop_relative_expired: discarded {dropped} expired element(s)")
    yield from ()  # never emits
