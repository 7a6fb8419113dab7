"""Keyboard bindings: held keys drive movement, taps enqueue commands."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from tick_mining.commands import Mine, ToggleInventory, ToggleUpgradeMenu, TradeAll

MOVEMENT_FLAGS = ("forward", "backward", "left", "right", "up", "down")


@dataclass(frozen=True)
class KeyMap:
    """Key name -> movement flag, and key name -> command factory.

    Key names are matched case-insensitively.
    """

    movement: dict[str, str] = field(default_factory=dict)
    actions: dict[str, Callable[[], Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, flag in self.movement.items():
            if flag not in MOVEMENT_FLAGS:
                raise ValueError(f"Key {key!r} bound to unknown movement flag {flag!r}")
        overlap = {k.lower() for k in self.movement} & {k.lower() for k in self.actions}
        if overlap:
            raise ValueError(f"Keys bound to both movement and an action: {sorted(overlap)}")

    def movement_flag(self, key: str) -> str | None:
        return self.movement.get(key.lower())

    def command(self, key: str) -> Any | None:
        """A fresh command for ``key``, or None if the key is unbound."""
        factory = self.actions.get(key.lower())
        return factory() if factory is not None else None


DEFAULT_KEYMAP = KeyMap(
    movement={
        "w": "forward",
        "s": "backward",
        "a": "left",
        "d": "right",
        "e": "up",
        "q": "down",
    },
    actions={
        "f": Mine,
        "t": TradeAll,
        "u": ToggleUpgradeMenu,
        "i": ToggleInventory,
    },
)
