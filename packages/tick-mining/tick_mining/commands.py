"""User action commands and the queue that delivers them into the tick."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from tick_mining.session import Session
    from tick_mining.types import TickContext


@dataclass(frozen=True)
class Mine:
    """Mine the currently targeted node."""


@dataclass(frozen=True)
class TradeAll:
    """Sell the whole cargo."""


@dataclass(frozen=True)
class Upgrade:
    """Upgrade to ``target_tier``, or the next tier when None."""

    target_tier: int | None = None


@dataclass(frozen=True)
class ToggleInventory:
    pass


@dataclass(frozen=True)
class ToggleUpgradeMenu:
    pass


class CommandQueue:
    """Routes user commands to typed handlers during the tick.

    Commands are frozen dataclasses, one handler per command class,
    dispatched by type in FIFO order. Draining inside the tick makes each
    handler's check-then-set indivisible with respect to the systems.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Any], Callable[..., bool]] = {}
        self._pending: deque[Any] = deque()

    def handle(
        self,
        cmd_type: type[Any],
        handler: Callable[..., bool],
    ) -> None:
        """Register ``handler(cmd, session, ctx) -> bool`` for a command type.

        Later calls overwrite.
        """
        self._handlers[cmd_type] = handler

    def enqueue(self, cmd: Any) -> None:
        """Add a command to the queue. Safe to call between ticks."""
        self._pending.append(cmd)

    def pending(self) -> int:
        return len(self._pending)

    def drain(
        self,
        session: Session,
        ctx: TickContext,
    ) -> list[tuple[Any, bool]]:
        """Process all pending commands. Returns ``[(cmd, accepted), ...]``.

        Raises ``TypeError`` if no handler is registered for a command's type.
        """
        results: list[tuple[Any, bool]] = []
        while self._pending:
            cmd = self._pending.popleft()
            cmd_type = type(cmd)
            handler = self._handlers.get(cmd_type)
            if handler is None:
                raise TypeError(
                    f"No handler registered for {cmd_type.__qualname__}"
                )
            accepted = handler(cmd, session, ctx)
            results.append((cmd, accepted))
        return results


def make_command_system(
    queue: CommandQueue,
    on_accept: Callable[[Any], None] | None = None,
    on_reject: Callable[[Any], None] | None = None,
) -> Callable[[Session, TickContext], None]:
    """Return a system that drains the command queue each tick.

    ``on_accept(cmd)`` fires after a handler returns True,
    ``on_reject(cmd)`` after it returns False.
    """

    def command_system(session: Session, ctx: TickContext) -> None:
        for cmd, accepted in queue.drain(session, ctx):
            if accepted:
                if on_accept is not None:
                    on_accept(cmd)
            elif on_reject is not None:
                on_reject(cmd)

    return command_system
