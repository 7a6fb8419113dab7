"""Engine - advances one session through virtual time, tick by tick."""

import os
import random

from tick_mining.clock import Clock
from tick_mining.session import Session
from tick_mining.types import System


class Engine:
    """Runs registered systems against one :class:`Session` each tick.

    Systems run in registration order and each runs to completion before
    the next one starts. There is no wall-clock pacing: callers decide how
    often to step, so the same seed and inputs always replay identically.
    """

    def __init__(self, session: Session, seed: int | None = None) -> None:
        self._session = session
        self._clock = Clock(session.config.tick_ms)
        self._systems: list[System] = []
        self._halted = False

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def _halt(self) -> None:
        self._halted = True

    def step(self) -> bool:
        """Advance one tick. Returns False if a system requested a stop.

        A stop request skips the systems after the requester for this tick.
        """
        self._halted = False
        self._clock.advance()
        ctx = self._clock.context(self._halt, self._rng)
        for system in self._systems:
            system(self._session, ctx)
            if self._halted:
                return False
        return True

    def run(self, n: int) -> int:
        """Advance up to ``n`` ticks, ending early on a stop request.

        Returns the number of ticks taken.
        """
        for taken in range(1, n + 1):
            if not self.step():
                return taken
        return n

    def run_for(self, ms: float) -> int:
        """Advance virtual time by ``ms`` milliseconds."""
        return self.run(self._clock.ticks_for(ms))
