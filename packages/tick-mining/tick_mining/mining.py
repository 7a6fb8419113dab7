"""Mining transactions: request, delayed completion, alerts."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tick_mining.signals import (
    ENERGY_DEPLETED,
    RESOURCE_GAINED,
    STORAGE_FULL,
    STORAGE_WARNING,
)
from tick_mining.state import SETTLE_TIMER, Trigger

if TYPE_CHECKING:
    from tick_mining.components import Cargo, ResourceNode, Stats
    from tick_mining.config import MiningConfig
    from tick_mining.schedule import Timer
    from tick_mining.session import Session
    from tick_mining.types import TickContext

MINING_TIMER = "mining"
STORAGE_ALERT_TIMER = "storage_alert"
STORAGE_WARNING_TIMER = "storage_warning"
ENERGY_ALERT_TIMER = "energy_alert"


@dataclass(frozen=True)
class MiningPlan:
    """How much one mining action would yield right now.

    Attributes:
        node_id: Node being mined.
        kind: Mineral of that node.
        amount: Units that would move from node to cargo.
        per_action_cap: Upper bound from the player's mining rate.
    """

    node_id: str
    kind: str
    amount: int
    per_action_cap: int


def per_action_cap(stats: Stats, config: MiningConfig) -> int:
    return max(1, math.floor(config.mining_yield_cap * stats.mining_rate))


def plan_mining(
    node: ResourceNode, cargo: Cargo, stats: Stats, config: MiningConfig
) -> MiningPlan:
    """Yield is bounded by the node, the free capacity and the per-action cap."""
    cap = per_action_cap(stats, config)
    amount = min(node.amount, cargo.remaining(node.kind), cap)
    return MiningPlan(
        node_id=node.id, kind=node.kind, amount=max(0, amount), per_action_cap=cap
    )


class MiningProcessor:
    """Runs mining transactions for one session.

    A request only starts from idle with a target in range. The transfer is
    applied when the mining timer fires, all at once, so no observer ever
    sees cargo credited without the node debited.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        timers = session.timers
        timers.register(MINING_TIMER, self._complete)
        timers.register(STORAGE_ALERT_TIMER, self._clear_storage_alert)
        timers.register(STORAGE_WARNING_TIMER, self._clear_storage_warning)
        timers.register(ENERGY_ALERT_TIMER, self._clear_energy_alert)

    def plan(self) -> MiningPlan | None:
        """Plan against the current target, or None without one."""
        session = self._session
        node = session.target_node()
        if node is None:
            return None
        return plan_mining(node, session.cargo, session.stats, session.config)

    def request(self) -> bool:
        """Start mining the current target. Returns True if a transaction began.

        With no room left for the target's mineral the state stays idle and
        the storage-full alert is raised instead.
        """
        session = self._session
        if not session.fsm.is_idle:
            return False
        plan = self.plan()
        if plan is None:
            return False
        if plan.amount <= 0:
            self._raise_storage_alert(plan)
            return False
        if not session.fsm.begin(Trigger.MINE):
            return False
        session.pending_node = plan.node_id
        session.timers.start(
            MINING_TIMER, session.config.ticks(session.config.mining_duration_ms)
        )
        return True

    def _raise_storage_alert(self, plan: MiningPlan) -> None:
        session = self._session
        session.storage_alert = True
        session.timers.start(
            STORAGE_ALERT_TIMER, session.config.ticks(session.config.storage_alert_ms)
        )
        session.bus.publish(
            STORAGE_FULL,
            node_id=plan.node_id,
            kind=plan.kind,
            used=session.cargo.used(plan.kind),
            capacity=session.cargo.capacity.get(plan.kind, 0),
        )

    def _check_storage_warning(self) -> None:
        """Raise the near-full warning when fill sits in [threshold, 100)."""
        session = self._session
        config = session.config
        percentage = session.cargo.fill_percentage()
        if not config.storage_warning_percent <= percentage < 100:
            return
        session.storage_warning = True
        session.timers.start(
            STORAGE_WARNING_TIMER, config.ticks(config.storage_warning_ms)
        )
        session.bus.publish(STORAGE_WARNING, percentage=percentage)

    def _complete(self, session: Session, ctx: TickContext, timer: Timer) -> None:
        config = session.config
        node_id = session.pending_node
        session.pending_node = None
        assert node_id is not None, "mining timer fired without a pending node"

        node = session.field.get(node_id)
        plan = plan_mining(node, session.cargo, session.stats, config)
        stored = session.cargo.add(plan.kind, plan.amount)
        session.field.extract(node_id, stored)
        self._check_storage_warning()

        stats = session.stats
        before = stats.energy
        stats.energy = max(0.0, stats.energy - config.mining_energy_cost)
        if before > 0 and stats.energy <= 0:
            session.energy_alert = True
            session.timers.start(
                ENERGY_ALERT_TIMER, config.ticks(config.energy_alert_ms)
            )
            session.bus.publish(ENERGY_DEPLETED, tier=stats.tier)

        session.fsm.fire(Trigger.MINING_COMPLETE)
        session.bus.publish(
            RESOURCE_GAINED,
            node_id=node_id,
            kind=plan.kind,
            amount=stored,
            node_remaining=node.amount,
            depleted=node.depleted,
        )
        session.timers.start(SETTLE_TIMER, config.ticks(config.settle_ms))

    def _clear_storage_alert(
        self, session: Session, ctx: TickContext, timer: Timer
    ) -> None:
        session.storage_alert = False

    def _clear_storage_warning(
        self, session: Session, ctx: TickContext, timer: Timer
    ) -> None:
        session.storage_warning = False

    def _clear_energy_alert(
        self, session: Session, ctx: TickContext, timer: Timer
    ) -> None:
        session.energy_alert = False
