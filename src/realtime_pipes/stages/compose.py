"""
Stage Plumbing and Composition

A stage is a generator function taking the upstream iterable as its first
argument:

    def stage(upstream, ...) -> Generator[T, None, R]

Pulling from the stage activates it; `yield` emits downstream. When the
upstream runs dry a stage returns the upstream's own completion value
(StopIteration.value), so `yield from` chains see it unchanged.

Composition:
    pipe(source, s1, s2)   - source feeds s1, s1 feeds s2
    then(s1, s2)           - s1 runs on the upstream, then s2 continues on
                             the *same* upstream once s1 completes
    drop_result(s)         - replace s's completion value with None
"""

import functools
import logging
from typing import Any, Callable, Generator, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

Stage = Callable[..., Generator[Any, None, Any]]


class _Exhausted:
    """Sentinel returned by Upstream.receive() at end of stream."""

    def __repr__(self):
        return 'EXHAUSTED'


EXHAUSTED = _Exhausted()


class Upstream(Iterator[T]):
    """
    Iterator over a stage's input that remembers how the input ended.

    Generators cannot let StopIteration escape (PEP 479), so stages that
    need to receive outside of a for-loop use receive(), which returns the
    EXHAUSTED sentinel instead of raising.
    """

    def __init__(self, source: Iterable[T]):
        self._it = iter(source)
        self.exhausted = False
        self.result: Any = None
        self.received = 0

    @classmethod
    def wrap(cls, source: Iterable[T]) -> 'Upstream[T]':
        """Reuse an existing Upstream so receive counts and results carry over."""
        return source if isinstance(source, Upstream) else cls(source)

    def __iter__(self) -> 'Upstream[T]':
        return self

    def __next__(self) -> T:
        if self.exhausted:
            raise StopIteration(self.result)
        try:
            value = next(self._it)
        except StopIteration as stop:
            self.exhausted = True
            self.result = stop.value
            raise
        self.received += 1
        return value

    def receive(self):
        """Next element, or EXHAUSTED if the upstream has ended."""
        try:
            return next(self)
        except StopIteration:
            return EXHAUSTED


def cat(upstream: Iterable[T]) -> Generator[T, None, Any]:
    """Unconditional passthrough; returns the upstream's completion value."""
    source = Upstream.wrap(upstream)
    for value in source:
        yield value
    return source.result


def drop_result(stage: Stage) -> Stage:
    """
    Wrap a stage so its completion value is discarded.

    Lets stages with different result types be sequenced with then(),
    e.g. then(drop_result(drop_expired), time_cat).
    """
    @functools.wraps(stage)
    def wrapper(upstream, *args, **kwargs):
        yield from stage(upstream, *args, **kwargs)
        return None

    return wrapper


def then(*stages: Stage) -> Stage:
    """
    Sequence stages over one shared upstream.

    Each stage runs until it completes; the next stage then picks up the
    upstream where the previous one left off. Stages after an exhausted
    upstream still run, they just see an empty input.

    Returns:
        A stage whose completion value is that of the last stage
    """
    if not stages:
        raise ValueError("then() needs at least one stage")

    def sequenced(upstream):
        source = Upstream.wrap(upstream)
        result = None
        for stage in stages:
            result = yield from stage(source)
        return result

    sequenced.__name__ = 'then(' + ', '.join(
        getattr(s, '__name__', repr(s)) for s in stages
    ) + ')'
    return sequenced


def pipe(source: Iterable[Any], *stages: Stage) -> Iterator[Any]:
    """
    Chain stages left to right.

    Args:
        source: Any iterable producing the elements
        stages: Callables taking the upstream iterable; use
            functools.partial or a lambda to bind extra arguments

    Returns:
        Iterator over the output of the last stage (the source itself
        if no stages are given)
    """
    stream: Iterable[Any] = source
    for stage in stages:
        stream = stage(stream)
    return iter(stream)
