"""
Wall-clock driver for the Airship Simulator.

The engine only understands "this much wall-clock time passed". TickClock
turns timestamps from a fixed-rate timer into those deltas and takes care
of pauses: time spent paused is dropped, and the reference timestamp is
re-based on resume so the first tick afterwards does not jump.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from .simulation import SimulationEngine, SimulationEvent


class TickClock:
    """
    Feeds an engine from a monotonic time source.

    Usage:
        clock = TickClock(engine)
        while running:
            clock.poll()
            time.sleep(engine_tick_interval)

    Attributes:
        engine: The engine being driven.
        time_source: Returns the current time in seconds.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        time_source: Callable[[], float] = time.monotonic
    ) -> None:
        self.engine = engine
        self.time_source = time_source
        self._last_time: Optional[float] = None

    def poll(self) -> list[SimulationEvent]:
        """
        Tick the engine with the time elapsed since the previous poll.

        Returns:
            Events produced by the tick (empty while paused or on the
            first poll, which only establishes the reference time).
        """
        now = self.time_source()
        last, self._last_time = self._last_time, now
        if last is None or self.engine.paused:
            return []
        return self.engine.tick(now - last)

    def pause(self) -> None:
        """Pause the engine."""
        self.engine.pause()

    def resume(self) -> None:
        """Resume the engine, discarding the time spent paused."""
        self.engine.resume()
        self._last_time = self.time_source()
