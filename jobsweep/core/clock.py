"""
Time sources for wait loops and randomized dwell.

Components never call asyncio.sleep or time.monotonic directly; they go through
a Clock so tests can swap in a VirtualClock and run every wait loop instantly.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import List


class Clock(ABC):
    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        pass

    @abstractmethod
    def monotonic(self) -> float:
        pass


class SystemClock(Clock):
    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

    def monotonic(self) -> float:
        return time.monotonic()


class VirtualClock(Clock):
    """
    Clock that advances only when slept on. Records every requested sleep.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: List[float] = []

    async def sleep(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        self.sleeps.append(seconds)
        self._now += seconds
        # Still yield to the loop so cancellation and wait_for keep working
        await asyncio.sleep(0)

    def monotonic(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    @property
    def slept(self) -> float:
        return sum(self.sleeps)
