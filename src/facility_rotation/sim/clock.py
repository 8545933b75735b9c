from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class TickClock:
    """Host-driven monotonic tick counter.

    The core never pulls time on its own; hosts pass ``clock.now()`` into the
    scheduler and coordinator explicitly.
    """

    def __init__(self, start_tick: int = 0) -> None:
        if isinstance(start_tick, bool) or not isinstance(start_tick, int) or start_tick < 0:
            raise ValueError("start_tick must be a non-negative integer")
        self._tick = start_tick

    def now(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        if isinstance(ticks, bool) or not isinstance(ticks, int) or ticks < 0:
            raise ValueError("ticks must be a non-negative integer")
        self._tick += ticks
        return self._tick

    def advance_to(self, tick: int) -> int:
        if isinstance(tick, bool) or not isinstance(tick, int):
            raise ValueError("tick must be an integer")
        if tick < self._tick:
            raise ValueError(f"clock cannot move backwards (now={self._tick}, requested={tick})")
        self._tick = tick
        return self._tick
