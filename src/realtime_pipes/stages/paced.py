"""
Externally-Paced Stages

Stages whose release times are chosen by the caller, independent of
element content:

    steady_cat            - fixed rate (Hz)
    gen_poisson_cat       - Poisson process, caller-seeded
    poisson_cat           - Poisson process, seeded from OS entropy
    cat_at_times          - explicit schedule of absolute deadlines
    cat_at_relative_times - explicit schedule of offsets from activation

All of them follow the same step: sleep until the next deadline, THEN
receive one element and emit it. Deadlines are always accumulated from
the previous deadline, never from a fresh now(), so slow consumers or
sleep overruns do not push the schedule back.

Schedule stages fall back to a plain passthrough once their schedule is
used up. Rate stages run until the upstream is exhausted.
"""

import logging
from typing import Any, Generator, Iterable, Optional

from ..timing.clock import WallClock, resolve_clock
from ..timing.conversions import Instant, as_instant, offset_to_deadline, seconds_to_duration
from ..timing.poisson import (
    SeedLike,
    entropy_seed,
    make_generator,
    poisson_deadlines,
    validate_rate,
)
from .compose import EXHAUSTED, Upstream, cat

logger = logging.getLogger(__name__)


def steady_cat(
    upstream: Iterable[Any],
    rate: float,
    *,
    clock: Optional[WallClock] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements at a steady rate.

    The first element is released 1/rate seconds after the stage is first
    pulled, then one every 1/rate seconds.

    Args:
        upstream: Any elements
        rate: Emissions per second (Hz), finite and > 0
        clock: Clock to read and sleep on (default: system clock)

    Raises:
        ValueError: if rate is invalid or its interval is too long to
            represent (raised immediately, not on first pull)
    """
    interval = seconds_to_duration(1.0 / validate_rate(rate))
    return _steady_cat(upstream, interval, resolve_clock(clock))


def _steady_cat(upstream, interval, clock):
    source = Upstream.wrap(upstream)
    deadline = clock.now()
    while True:
        deadline = deadline + interval
        clock.sleep_until(deadline)
        value = source.receive()
        if value is EXHAUSTED:
            return source.result
        yield value


def gen_poisson_cat(
    upstream: Iterable[Any],
    seed: SeedLike,
    rate: float,
    *,
    clock: Optional[WallClock] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements as a constant-rate Poisson process, seeded by you.

    Inter-arrival delays are drawn in batches of POISSON_BATCH_SIZE. Each
    new batch starts from the last deadline of the previous one.

    Args:
        upstream: Any elements
        seed: int, numpy SeedSequence, or numpy Generator. The generator
            is built when the stage is first pulled, so an int seed gives
            the same deadlines on every run. A Generator is used (and
            advanced) as-is.
        rate: Mean emissions per second, finite and > 0
        clock: Clock to read and sleep on (default: system clock)

    Raises:
        ValueError: if rate is invalid
    """
    return _gen_poisson_cat(upstream, seed, validate_rate(rate), resolve_clock(clock))


def _gen_poisson_cat(upstream, seed, rate, clock):
    source = Upstream.wrap(upstream)
    rng = make_generator(seed)
    deadlines = poisson_deadlines(rng, clock.now(), rate)
    batch = 1

    while True:
        for deadline in deadlines:
            clock.sleep_until(deadline)
            value = source.receive()
            if value is EXHAUSTED:
                return source.result
            yield value

        batch += 1
        logger.debug(f"gen_poisson_cat: generating batch {batch} from {deadlines[-1]}")
        deadlines = poisson_deadlines(rng, deadlines[-1], rate)


def poisson_cat(
    upstream: Iterable[Any],
    rate: float,
    *,
    clock: Optional[WallClock] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements as a constant-rate Poisson process with a random seed.

    The seed is drawn from OS entropy when the stage is first pulled and
    logged at DEBUG level; pass it to gen_poisson_cat to replay the same
    arrival times.

    Raises:
        ValueError: if rate is invalid
    """
    return _poisson_cat(upstream, validate_rate(rate), resolve_clock(clock))


def _poisson_cat(upstream, rate, clock):
    seed = entropy_seed()
    logger.debug(f"poisson_cat: seed={seed} rate={rate}Hz")
    return (yield from _gen_poisson_cat(upstream, seed, rate, clock))


def cat_at_times(
    upstream: Iterable[Any],
    schedule: Iterable[Instant],
    *,
    clock: Optional[WallClock] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements at a set of absolute times.

    Each deadline releases exactly one element. Once the schedule runs out
    the remaining elements are yielded immediately.

    Args:
        upstream: Any elements
        schedule: Ascending deadlines (datetime or POSIX seconds); read
            lazily, so a generator works too
        clock: Clock to read and sleep on (default: system clock)
    """
    clock = resolve_clock(clock)
    source = Upstream.wrap(upstream)

    for deadline in schedule:
        clock.sleep_until(as_instant(deadline))
        value = source.receive()
        if value is EXHAUSTED:
            return source.result
        yield value

    logger.info(f"cat_at_times: schedule exhausted after {source.received} element(s), passing through")
    return (yield from cat(source))


def cat_at_relative_times(
    upstream: Iterable[Any],
    offsets: Iterable[float],
    *,
    clock: Optional[WallClock] = None
) -> Generator[Any, None, Any]:
    """
    Yield elements at a set of times relative to when the stage starts.

    With no offsets this is a plain passthrough. Otherwise the start
    instant t0 is read once and each offset becomes the deadline
    t0 + offset for cat_at_times.

    Args:
        upstream: Any elements
        offsets: Ascending offsets in seconds
        clock: Clock to read and sleep on (default: system clock)
    """
    clock = resolve_clock(clock)
    offsets = list(offsets)
    if not offsets:
        return (yield from cat(upstream))

    t0 = clock.now()
    schedule = [offset_to_deadline(t0, offset) for offset in offsets]
    return (yield from cat_at_times(upstream, schedule, clock=clock))
