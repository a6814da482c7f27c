"""
Poisson Arrival Process

For a Poisson process with rate λ (events/second) the inter-arrival times
are i.i.d. Exponential(λ). Uniform draws u in [0,1) are mapped through the
exponential inverse CDF:

    delay = -ln(1 - u) / λ

Deadlines are produced in batches. Within a batch each deadline is
base + (running sum of delays), so no time is lost to re-measuring now().
The next batch uses the last deadline of the previous one as its base,
which keeps the process continuous across batch boundaries.
"""

import logging
import math
from datetime import datetime
from typing import List, Union

import numpy as np
from scipy import stats

from .conversions import Instant, as_instant, seconds_to_duration

logger = logging.getLogger(__name__)

# Deadlines generated per batch
POISSON_BATCH_SIZE = 100

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def validate_rate(rate: float) -> float:
    """
    Check an events-per-second rate.

    Raises:
        ValueError: if rate is not a finite number > 0
    """
    rate = float(rate)
    if not math.isfinite(rate) or rate <= 0:
        raise ValueError(f"rate must be a finite number > 0, got {rate}")
    return rate


def uniform_to_exponential(rate: float, u):
    """
    Inverse-CDF transform from Uniform[0,1) to Exponential(rate).

    Args:
        rate: Events per second (λ)
        u: Uniform value(s) in [0,1), scalar or array

    Returns:
        Inter-arrival delay(s) in seconds, same shape as `u`
    """
    return stats.expon.ppf(u, scale=1.0 / validate_rate(rate))


def make_generator(seed: SeedLike = None) -> np.random.Generator:
    """Build a numpy Generator; an existing Generator is returned as-is."""
    return np.random.default_rng(seed)


def entropy_seed() -> int:
    """Fresh non-deterministic seed drawn from OS entropy."""
    return int(np.random.SeedSequence().entropy)


def poisson_deadlines(
    rng: np.random.Generator,
    base: Instant,
    rate: float,
    count: int = POISSON_BATCH_SIZE
) -> List[datetime]:
    """
    Generate the next `count` Poisson arrival deadlines after `base`.

    Args:
        rng: Random generator (advanced in place)
        base: Instant the first inter-arrival delay is measured from
        rate: Events per second
        count: Number of deadlines to generate

    Returns:
        Ascending list of `count` absolute deadlines, all > base
        (or == base for a zero draw)
    """
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")

    base = as_instant(base)
    uniforms = rng.random(count)
    delays = uniform_to_exponential(rate, uniforms)
    offsets = np.cumsum(delays)

    return [base + seconds_to_duration(offset) for offset in offsets]
