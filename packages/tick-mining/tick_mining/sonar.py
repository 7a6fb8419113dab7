"""Rotating sonar sweep: which nodes are lit on the scope this tick."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from tick_mining.components import OtherPlayer, Position, ResourceNode
    from tick_mining.session import Session
    from tick_mining.types import TickContext

TWO_PI = 2 * math.pi


def sweep_angle(elapsed_seconds: float, rate: float = 1.0) -> float:
    """Sweep angle in [0, 2*pi) after ``elapsed_seconds``."""
    return (elapsed_seconds * rate) % TWO_PI


def bearing(px: float, pz: float, nx: float, ny: float) -> float:
    """Angle from the player at (px, pz) to a node at (nx, ny), in [0, 2*pi)."""
    return math.atan2(ny - pz, nx - px) % TWO_PI


def in_trailing_arc(node_bearing: float, sweep: float, arc: float) -> bool:
    """True if ``node_bearing`` lies within ``arc`` radians behind ``sweep``.

    The difference is taken modulo 2*pi, so an arc straddling angle 0 works.
    """
    return (sweep - node_bearing) % TWO_PI <= arc


@dataclass(frozen=True)
class SonarSweep:
    """Sweep parameters.

    Attributes:
        rate: Radians per second.
        arc: Width of the lit trailing arc, radians.
        max_range: Nodes further than this are never shown.
    """

    rate: float = 1.0
    arc: float = 1.0
    max_range: float = 50.0

    def angle(self, elapsed_seconds: float) -> float:
        return sweep_angle(elapsed_seconds, self.rate)

    def visible(
        self,
        position: Position,
        nodes: Iterable[ResourceNode],
        elapsed_seconds: float,
    ) -> frozenset[str]:
        """Ids of non-depleted nodes in range and inside the trailing arc."""
        sweep = self.angle(elapsed_seconds)
        lit: set[str] = set()
        for node in nodes:
            if node.depleted:
                continue
            dx = node.x - position.x
            dz = node.y - position.z
            if math.hypot(dx, dz) > self.max_range:
                continue
            b = bearing(position.x, position.z, node.x, node.y)
            if in_trailing_arc(b, sweep, self.arc):
                lit.add(node.id)
        return frozenset(lit)

    def contacts(
        self, position: Position, players: Iterable[OtherPlayer]
    ) -> frozenset[str]:
        """Other players within range. Not gated by the sweep."""
        return frozenset(
            p.id
            for p in players
            if math.hypot(p.x - position.x, p.z - position.z) <= self.max_range
        )


def make_sonar_system() -> Callable[[Session, TickContext], None]:
    """Return a system that refreshes the sweep angle and lit node ids.

    The sweep is driven by the engine's virtual elapsed time.
    """
    sweep: SonarSweep | None = None

    def sonar_system(session: Session, ctx: TickContext) -> None:
        nonlocal sweep
        config = session.config
        if sweep is None:
            sweep = SonarSweep(
                rate=config.sonar_rate, arc=config.sonar_arc, max_range=config.sonar_range
            )
        session.sweep_angle = sweep.angle(ctx.elapsed)
        session.visible_nodes = sweep.visible(session.position, session.field, ctx.elapsed)
        session.contacts = sweep.contacts(session.position, session.other_players)

    return sonar_system
