"""Clock and TickContext for the fixed-timestep simulation."""

import random
from typing import Callable

from tick_mining.types import TickContext


class Clock:
    """Counts fixed ticks of ``tick_ms`` milliseconds of virtual time."""

    def __init__(self, tick_ms: float) -> None:
        if tick_ms <= 0:
            raise ValueError("tick_ms must be positive")
        self._tick_ms = tick_ms
        self._dt = tick_ms / 1000.0
        self._tick_number = 0

    @property
    def tick_ms(self) -> float:
        return self._tick_ms

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def elapsed(self) -> float:
        """Virtual seconds since tick 0."""
        return self._tick_number * self._dt

    def advance(self) -> int:
        self._tick_number += 1
        return self._tick_number

    def ticks_for(self, ms: float) -> int:
        """Number of whole ticks covering ``ms`` milliseconds (at least 1)."""
        return max(1, round(ms / self._tick_ms))

    def context(self, stop_fn: Callable[[], None], rng: random.Random) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            dt=self._dt,
            elapsed=self.elapsed,
            request_stop=stop_fn,
            random=rng,
        )
