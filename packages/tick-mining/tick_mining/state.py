"""Game state machine: the single-flight guard for mine/trade/upgrade."""
from __future__ import annotations

import sys
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Callable

from tick_mining.types import InvalidTransitionError

if TYPE_CHECKING:
    from tick_mining.schedule import Timer
    from tick_mining.session import Session
    from tick_mining.types import TickContext

SETTLE_TIMER = "settle"


class GameState(Enum):
    """Session-wide action state."""

    IDLE = "idle"
    MINING = "mining"
    RESOURCE_GAINED = "resourceGained"
    TRADING = "trading"
    RESOURCE_TRADED = "resourceTraded"
    UPGRADING = "upgrading"
    UPGRADED = "upgraded"


class Trigger(Enum):
    MINE = "mine"
    MINING_COMPLETE = "mining_complete"
    TRADE = "trade"
    TRADE_SUCCEEDED = "trade_succeeded"
    TRADE_FAILED = "trade_failed"
    UPGRADE = "upgrade"
    UPGRADE_COMPLETE = "upgrade_complete"
    UPGRADE_FAILED = "upgrade_failed"
    SETTLE = "settle"


# Triggers a user action may use, and only from IDLE.
ENTRY_TRIGGERS = frozenset({Trigger.MINE, Trigger.TRADE, Trigger.UPGRADE})

TRANSITIONS: dict[GameState, dict[Trigger, GameState]] = {
    GameState.IDLE: {
        Trigger.MINE: GameState.MINING,
        Trigger.TRADE: GameState.TRADING,
        Trigger.UPGRADE: GameState.UPGRADING,
    },
    GameState.MINING: {
        Trigger.MINING_COMPLETE: GameState.RESOURCE_GAINED,
    },
    GameState.RESOURCE_GAINED: {
        Trigger.SETTLE: GameState.IDLE,
    },
    GameState.TRADING: {
        Trigger.TRADE_SUCCEEDED: GameState.RESOURCE_TRADED,
        Trigger.TRADE_FAILED: GameState.IDLE,
    },
    GameState.RESOURCE_TRADED: {
        Trigger.SETTLE: GameState.IDLE,
    },
    GameState.UPGRADING: {
        Trigger.UPGRADE_COMPLETE: GameState.UPGRADED,
        Trigger.UPGRADE_FAILED: GameState.IDLE,
    },
    GameState.UPGRADED: {
        Trigger.SETTLE: GameState.IDLE,
    },
}

_TransitionCallback = Callable[[GameState, GameState, Trigger], None]


class GameStateMachine:
    """Holds the current :class:`GameState` and applies table transitions.

    User actions go through :meth:`begin`, which is a check-then-set that
    only succeeds from ``IDLE``. Everything else is system-driven through
    :meth:`fire`.
    """

    def __init__(self, history_size: int = 32) -> None:
        self._state = GameState.IDLE
        self._callbacks: list[_TransitionCallback] = []
        self.history: deque[tuple[GameState, GameState, Trigger]] = deque(
            maxlen=history_size
        )

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is GameState.IDLE

    def can_fire(self, trigger: Trigger) -> bool:
        return trigger in TRANSITIONS[self._state]

    def begin(self, trigger: Trigger) -> bool:
        """Start a user action. Returns False (no-op) unless currently idle."""
        if trigger not in ENTRY_TRIGGERS:
            raise ValueError(f"{trigger.value!r} is not a user action trigger")
        if not self.is_idle:
            return False
        self._apply(trigger)
        return True

    def fire(self, trigger: Trigger) -> GameState:
        """Apply a system transition. Raises InvalidTransitionError if not allowed."""
        if not self.can_fire(trigger):
            raise InvalidTransitionError(
                f"No transition from {self._state.value!r} on {trigger.value!r}"
            )
        self._apply(trigger)
        return self._state

    def on_transition(self, callback: _TransitionCallback) -> None:
        """Register ``callback(old, new, trigger)``, fired after each transition."""
        self._callbacks.append(callback)

    def _apply(self, trigger: Trigger) -> None:
        old = self._state
        new = TRANSITIONS[old][trigger]
        self._state = new
        self.history.append((old, new, trigger))
        for cb in self._callbacks:
            try:
                cb(old, new, trigger)
            except Exception:
                print(
                    f"tick-mining: on_transition callback error: {sys.exc_info()[1]}",
                    file=sys.stderr,
                )


def settle(session: Session, ctx: TickContext, timer: Timer) -> None:
    """Timer handler returning a result state to idle."""
    session.fsm.fire(Trigger.SETTLE)
