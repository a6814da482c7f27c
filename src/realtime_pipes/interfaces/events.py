"""
Timing Capability Contracts

Elements flowing through the self-paced stages describe their own timing
through one of two contracts:

    TimedEvent - time_of() -> absolute instant at which to emit
    TMinus     - t_minus_sec() -> seconds after stage activation to emit

Element types satisfy a contract either by subclassing it or simply by
defining the method (structural check via __subclasshook__). Stages that
accept a `key=` callable can also pace elements that satisfy neither.

Both contracts assume elements arrive in ascending time order. Nothing
here sorts or validates ordering.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Optional

from ..timing.conversions import Instant, as_instant


def _defines(cls, method: str) -> bool:
    for klass in cls.__mro__:
        if method in klass.__dict__:
            return klass.__dict__[method] is not None
    return False


class TimedEvent(ABC):
    """Element carrying the absolute instant at which it should be yielded."""

    @abstractmethod
    def time_of(self) -> Instant:
        """
        Absolute emission instant.

        Returns:
            datetime (naive is read as UTC) or POSIX seconds
        """
        pass

    @classmethod
    def __subclasshook__(cls, C):
        if cls is TimedEvent:
            return _defines(C, 'time_of') or NotImplemented
        return NotImplemented


class TMinus(ABC):
    """Element carrying a relative emission time in seconds."""

    @abstractmethod
    def t_minus_sec(self) -> float:
        """
        Seconds after the stage started running at which to yield this
        element. Negative values mean the element is already late.
        """
        pass

    @classmethod
    def __subclasshook__(cls, C):
        if cls is TMinus:
            return _defines(C, 't_minus_sec') or NotImplemented
        return NotImplemented


TimeKey = Callable[[Any], Instant]
OffsetKey = Callable[[Any], float]


def time_of(value: Any, key: Optional[TimeKey] = None) -> datetime:
    """
    Absolute emission instant of `value` as an aware UTC datetime.

    Raises:
        TypeError: if value is not a TimedEvent and no key is given
    """
    if key is not None:
        return as_instant(key(value))
    if not isinstance(value, TimedEvent):
        raise TypeError(
            f"{type(value).__name__} does not implement time_of(); "
            f"pass key= to extract its timestamp"
        )
    return as_instant(value.time_of())


def t_minus_sec(value: Any, key: Optional[OffsetKey] = None) -> float:
    """
    Relative emission offset of `value` in seconds.

    Raises:
        TypeError: if value is not a TMinus and no key is given
    """
    if key is not None:
        return float(key(value))
    if not isinstance(value, TMinus):
        raise TypeError(
            f"{type(value).__name__} does not implement t_minus_sec(); "
            f"pass key= to extract its offset"
        )
    return float(value.t_minus_sec())
