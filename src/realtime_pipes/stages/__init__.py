"""
Pacing stages.

Contains:
- Self-timed stages: time_cat, relative_time_cat, drop_expired, drop_relative_expired
- Externally-paced stages: steady_cat, poisson_cat, gen_poisson_cat,
  cat_at_times, cat_at_relative_times
- Composition: cat, drop_result, then, pipe
"""

from .compose import EXHAUSTED, Upstream, cat, drop_result, then, pipe
from .timed import time_cat, relative_time_cat, drop_expired, drop_relative_expired
from .paced import (
    steady_cat,
    poisson_cat,
    gen_poisson_cat,
    cat_at_times,
    cat_at_relative_times,
)

__all__ = [
    'EXHAUSTED', 'Upstream', 'cat', 'drop_result', 'then', 'pipe',
    'time_cat', 'relative_time_cat', 'drop_expired', 'drop_relative_expired',
    'steady_cat', 'poisson_cat', 'gen_poisson_cat',
    'cat_at_times', 'cat_at_relative_times',
]
