"""One-shot named timers for delayed completions and alert expiry."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from tick_mining.session import Session
    from tick_mining.types import TickContext


@dataclass
class Timer:
    """One-shot countdown in ticks. Fires when remaining reaches 0."""

    name: str
    remaining: int


_Handler = Callable[["Session", "TickContext", Timer], None]


class TimerSet:
    """Running timers keyed by name, plus the handler registered for each name."""

    def __init__(self) -> None:
        self._timers: dict[str, Timer] = {}
        self._handlers: dict[str, _Handler] = {}

    def register(self, name: str, handler: _Handler) -> None:
        """Set the handler fired when a timer called ``name`` expires."""
        self._handlers[name] = handler

    def start(self, name: str, ticks: int) -> Timer:
        """Start (or restart) a timer. Raises KeyError for an unregistered name."""
        if name not in self._handlers:
            raise KeyError(f"No handler registered for timer {name!r}")
        if ticks < 1:
            raise ValueError(f"ticks must be >= 1, got {ticks}")
        timer = Timer(name=name, remaining=ticks)
        self._timers[name] = timer
        return timer

    def cancel(self, name: str) -> None:
        self._timers.pop(name, None)

    def running(self, name: str) -> bool:
        return name in self._timers

    def remaining(self, name: str) -> int:
        """Ticks left on a timer, 0 if not running."""
        timer = self._timers.get(name)
        return timer.remaining if timer is not None else 0

    def names(self) -> list[str]:
        return list(self._timers)

    def _expire(self) -> list[Timer]:
        due: list[Timer] = []
        for name, timer in list(self._timers.items()):
            timer.remaining -= 1
            if timer.remaining <= 0:
                del self._timers[name]
                due.append(timer)
        return due

    def _handler(self, name: str) -> _Handler:
        return self._handlers[name]


def make_timer_system(timers: TimerSet) -> Callable[[Session, TickContext], None]:
    """Return a system that decrements timers and fires handlers at zero.

    A handler may start new timers; they begin counting on the next tick.
    """

    def timer_system(session: Session, ctx: TickContext) -> None:
        for timer in timers._expire():
            timers._handler(timer.name)(session, ctx, timer)

    return timer_system
