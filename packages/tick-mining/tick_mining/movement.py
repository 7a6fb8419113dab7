"""Per-tick movement integration inside the world bounds."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from tick_mining.components import MovementIntent, Position, Stats
    from tick_mining.config import MiningConfig
    from tick_mining.session import Session
    from tick_mining.types import TickContext


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def integrate(
    position: Position,
    intent: MovementIntent,
    stats: Stats,
    config: MiningConfig,
) -> bool:
    """Advance ``position`` by one tick of ``intent``.

    Heading 0 faces -z. Opposing flags cancel. Displacement is applied in
    full, then the result is clamped to the world box. Does nothing when
    energy is exhausted. Returns True if the position or heading changed.
    """
    if stats.energy <= 0:
        return False

    before = (position.x, position.y, position.z, position.heading)
    step = stats.speed * config.speed_scale

    if intent.left:
        position.heading += config.turn_rate
    if intent.right:
        position.heading -= config.turn_rate

    h = position.heading
    if intent.forward:
        position.x -= math.sin(h) * step
        position.z -= math.cos(h) * step
    if intent.backward:
        position.x += math.sin(h) * step
        position.z += math.cos(h) * step
    if intent.up:
        position.y += step
    if intent.down:
        position.y = max(config.min_altitude, position.y - step)

    bound = config.bounds_xz
    position.x = _clamp(position.x, -bound, bound)
    position.z = _clamp(position.z, -bound, bound)
    position.y = _clamp(position.y, config.min_altitude, config.max_altitude)

    return before != (position.x, position.y, position.z, position.heading)


def make_movement_system() -> Callable[[Session, TickContext], None]:
    def movement_system(session: Session, ctx: TickContext) -> None:
        integrate(session.position, session.intent, session.stats, session.config)

    return movement_system
