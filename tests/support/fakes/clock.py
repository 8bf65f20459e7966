"""
Fake Clock

Virtual monotonic time. ``sleep`` advances the clock instead of waiting,
so a 10 s wait finishes instantly while the engine under test observes
10 s elapsing.
"""

from __future__ import annotations

import asyncio


class FakeClock:
    """
    Usage:
        clock = FakeClock()
        engine = WaitEngine(driver, clock=clock.monotonic, sleep=clock.sleep)
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self.now += seconds
