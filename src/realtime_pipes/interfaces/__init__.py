"""Capability contracts for self-timed elements."""

from .events import TimedEvent, TMinus, time_of, t_minus_sec

__all__ = ['TimedEvent', 'TMinus', 'time_of', 't_minus_sec']
