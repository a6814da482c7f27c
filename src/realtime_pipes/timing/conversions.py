"""
Time Conversions

Absolute instants are timezone-aware UTC datetimes and durations are
timedeltas. Seconds arriving as floats are floored to whole microseconds,
the resolution of both timedelta and the sleep primitive.

Accepted instant inputs:
    datetime (aware)   -> converted to UTC
    datetime (naive)   -> assumed to already be UTC
    int / float        -> POSIX seconds, as returned by time.time()
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Union

import numpy as np

Instant = Union[datetime, float, int]

MICROSECONDS_PER_SECOND = 1_000_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def seconds_to_duration(seconds: float) -> timedelta:
    """
    Convert floating-point seconds to a timedelta.

    The value is floored to whole microseconds, so 0.0000019 s becomes
    1 µs and -0.0000001 s becomes -1 µs.

    Raises:
        ValueError: if seconds is NaN, infinite, or beyond the timedelta range
    """
    seconds = float(seconds)
    if not math.isfinite(seconds):
        raise ValueError(f"Cannot convert non-finite seconds to a duration: {seconds}")
    try:
        return timedelta(microseconds=math.floor(seconds * MICROSECONDS_PER_SECOND))
    except OverflowError as e:
        raise ValueError(f"Duration out of range: {seconds} s") from e


def duration_to_seconds(duration: timedelta) -> float:
    """Convert a timedelta to floating-point seconds."""
    return duration.total_seconds()


def as_instant(value: Instant) -> datetime:
    """
    Normalize a timestamp to a timezone-aware UTC datetime.

    Args:
        value: datetime, or POSIX seconds as int/float (numpy scalars too)

    Returns:
        Aware datetime in UTC

    Raises:
        TypeError: for any other type (bool is rejected explicitly)
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("bool is not a valid timestamp")
    if isinstance(value, (int, float, np.integer, np.floating)):
        return EPOCH + seconds_to_duration(float(value))
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def offset_to_deadline(base: Instant, offset_sec: float) -> datetime:
    """Absolute deadline `offset_sec` seconds after `base` (before, if negative)."""
    return as_instant(base) + seconds_to_duration(offset_sec)


def deadline_to_offset(base: Instant, deadline: Instant) -> float:
    """Signed seconds from `base` to `deadline`."""
    return duration_to_seconds(as_instant(deadline) - as_instant(base))
