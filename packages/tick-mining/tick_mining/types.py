"""Shared types, mineral names and errors for tick-mining."""

from __future__ import annotations

import random as _random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal

Mineral = Literal["nickel", "cobalt", "copper", "manganese"]

MINERALS: tuple[str, ...] = ("nickel", "cobalt", "copper", "manganese")


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt: float
    elapsed: float
    request_stop: Callable[[], None]
    random: _random.Random


class UnknownTierError(KeyError):
    """Raised when a tier number is not present in the catalog."""

    def __init__(self, tier: int) -> None:
        self.tier = tier
        super().__init__(f"Unknown tier {tier}")


class UnknownNodeError(KeyError):
    """Raised when a resource node id is not present in the field."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Unknown resource node {node_id!r}")


class InvalidTransitionError(RuntimeError):
    """Raised on a game state transition that is not in the table."""


class ConfigError(ValueError):
    """Raised on invalid or unknown configuration values."""


def check_mineral(kind: str) -> None:
    if kind not in MINERALS:
        raise ValueError(f"Unknown mineral {kind!r}, expected one of {MINERALS}")


if TYPE_CHECKING:
    from tick_mining.session import Session

System = Callable[["Session", TickContext], None]
