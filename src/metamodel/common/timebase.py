"""
Clocks for timestamping stream history.

A Stream asks its timebase for ``now()`` once per committed event and resets
it on ``restart()``. Real clocks ignore the reset; ManualClock rewinds, so a
replayed history carries the same timestamps as the first run.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Timebase(ABC):
    @abstractmethod
    def now(self) -> float:
        pass

    def reset(self) -> None:
        pass


class WallClock(Timebase):
    def now(self) -> float:
        return datetime.now().timestamp()


class ManualClock(Timebase):
    """Clock driven by the caller.

    With ``tick`` set, every ``now()`` call returns the current reading and
    then moves the clock forward by ``tick``, giving each event its own stamp.
    """

    def __init__(self, start: float = 0, tick: float = 0):
        self.start = start
        self.tick = tick
        self.value = start

    def now(self) -> float:
        reading = self.value
        self.value += self.tick
        return reading

    def advance(self, delta: float = 1) -> None:
        self.value += delta

    def set(self, value: float) -> None:
        self.value = value

    def reset(self) -> None:
        self.value = self.start
