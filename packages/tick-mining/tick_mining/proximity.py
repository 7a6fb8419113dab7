"""Nearest-mineable-node targeting."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, Iterable

from tick_mining.signals import TARGET_CHANGED

if TYPE_CHECKING:
    from tick_mining.components import Position, ResourceNode
    from tick_mining.session import Session
    from tick_mining.types import TickContext


def planar_distance(position: Position, node: ResourceNode) -> float:
    """Distance on the seabed plane between the player and a node."""
    return math.hypot(node.x - position.x, node.y - position.z)


def find_target(
    position: Position, nodes: Iterable[ResourceNode], radius: float
) -> ResourceNode | None:
    """First non-depleted node, in field order, strictly inside ``radius``."""
    for node in nodes:
        if node.depleted:
            continue
        if planar_distance(position, node) < radius:
            return node
    return None


def make_proximity_system() -> Callable[[Session, TickContext], None]:
    """Return a system that recomputes ``session.target`` every tick.

    Publishes ``target_changed`` whenever the selected node id changes.
    """

    def proximity_system(session: Session, ctx: TickContext) -> None:
        node = find_target(
            session.position, session.field, session.config.proximity_radius
        )
        new_id = node.id if node is not None else None
        if new_id != session.target:
            old_id = session.target
            session.target = new_id
            session.bus.publish(TARGET_CHANGED, old=old_id, new=new_id)

    return proximity_system
