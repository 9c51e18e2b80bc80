from .clock import Clock, ManualClock, SystemClock
from .ids import IdGenerator, SequentialIdGenerator, UuidIdGenerator

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "IdGenerator",
    "SequentialIdGenerator",
    "UuidIdGenerator",
]
