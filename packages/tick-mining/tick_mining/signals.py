"""Signal bus used to report simulation outcomes to collaborators.

Signals are queued while systems run and delivered together at the end of
the tick, so subscribers always observe a consistent post-tick state.
"""
from __future__ import annotations

import sys
from collections import deque
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from tick_mining.session import Session
    from tick_mining.types import TickContext

STORAGE_FULL = "storage_full"
STORAGE_WARNING = "storage_warning"
RESOURCE_GAINED = "resource_gained"
ENERGY_DEPLETED = "energy_depleted"
ENERGY_FULL = "energy_full"
TRADE_STARTED = "trade_started"
TRADE_SUCCEEDED = "trade_succeeded"
TRADE_FAILED = "trade_failed"
UPGRADE_STARTED = "upgrade_started"
UPGRADED = "upgraded"
UPGRADE_UNAVAILABLE = "upgrade_unavailable"
UPGRADE_FAILED = "upgrade_failed"
STATE_CHANGED = "state_changed"
TARGET_CHANGED = "target_changed"

_Handler = Callable[[str, dict[str, Any]], None]


class SignalBus:

    def __init__(self, history_size: int = 256) -> None:
        self._subscribers: dict[str, list[_Handler]] = {}
        self._queue: list[tuple[str, dict[str, Any]]] = []
        self._history: deque[tuple[str, dict[str, Any]]] = deque(maxlen=history_size)

    def subscribe(self, signal_name: str, handler: _Handler) -> None:
        self._subscribers.setdefault(signal_name, []).append(handler)

    def unsubscribe(self, signal_name: str, handler: _Handler) -> None:
        handlers = self._subscribers.get(signal_name)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, signal_name: str, **data: Any) -> None:
        self._queue.append((signal_name, data))

    def pending(self) -> list[str]:
        """Names of signals queued but not yet delivered."""
        return [name for name, _ in self._queue]

    def flush(self) -> None:
        """Deliver queued signals. Handler exceptions are reported, not raised."""
        snapshot = self._queue
        self._queue = []
        for signal_name, data in snapshot:
            self._history.append((signal_name, data))
            for handler in list(self._subscribers.get(signal_name, [])):
                try:
                    handler(signal_name, data)
                except Exception:
                    print(
                        f"tick-mining: {signal_name} handler error: {sys.exc_info()[1]}",
                        file=sys.stderr,
                    )

    def delivered(self, signal_name: str | None = None) -> list[tuple[str, dict[str, Any]]]:
        """Signals delivered so far, optionally filtered by name."""
        if signal_name is None:
            return list(self._history)
        return [entry for entry in self._history if entry[0] == signal_name]

    def clear(self) -> None:
        self._queue.clear()


def make_signal_system(bus: SignalBus) -> Callable[[Session, TickContext], None]:
    def signal_system(session: Session, ctx: TickContext) -> None:
        bus.flush()

    return signal_system
