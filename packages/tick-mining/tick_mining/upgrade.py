"""Tier upgrades: eligibility, delayed completion, atomic charging."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from tick_mining.components import Stats
from tick_mining.signals import (
    UPGRADE_FAILED,
    UPGRADE_STARTED,
    UPGRADE_UNAVAILABLE,
    UPGRADED,
)
from tick_mining.state import SETTLE_TIMER, Trigger

if TYPE_CHECKING:
    from tick_mining.schedule import Timer
    from tick_mining.session import Session
    from tick_mining.tiers import TierDefinition, UpgradeCost
    from tick_mining.types import TickContext

UPGRADE_TIMER = "upgrade"


class UpgradeStatus(Enum):
    AVAILABLE = "available"
    MAX_TIER = "max_tier"
    INVALID_TARGET = "invalid_target"
    UNAFFORDABLE = "unaffordable"
    BUSY = "busy"


@dataclass(frozen=True)
class UpgradeOption:
    """One row of the upgrade menu."""

    definition: TierDefinition
    status: UpgradeStatus


def can_afford(session: Session, cost: UpgradeCost) -> bool:
    """True if cargo holds every mineral and the balance covers the tokens."""
    return session.cargo.has_all(cost.minerals()) and session.balance >= cost.tokens


class UpgradeProcessor:
    """Runs upgrade transactions for one session.

    The price of a transaction is the target tier's ``upgrade_cost``. When
    ``charge_upgrades`` is set the price is re-checked and deducted on the
    same tick the new stats are installed.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        session.timers.register(UPGRADE_TIMER, self._complete)

    def status(self, target: int | None = None) -> UpgradeStatus:
        session = self._session
        catalog = session.catalog
        current = session.stats.tier
        if catalog.is_max(current):
            return UpgradeStatus.MAX_TIER
        if target is None:
            target = current + 1
        if target <= current or not catalog.has(target):
            return UpgradeStatus.INVALID_TARGET
        if not session.fsm.is_idle:
            return UpgradeStatus.BUSY
        if not can_afford(session, catalog.get(target).upgrade_cost):
            return UpgradeStatus.UNAFFORDABLE
        return UpgradeStatus.AVAILABLE

    def options(self) -> list[UpgradeOption]:
        """Every tier above the current one with its status."""
        session = self._session
        return [
            UpgradeOption(definition=d, status=self.status(d.tier))
            for d in session.catalog.higher(session.stats.tier)
        ]

    def request(self, target: int | None = None) -> bool:
        """Begin upgrading. Returns True if the transaction started."""
        session = self._session
        status = self.status(target)
        if target is None:
            target = session.stats.tier + 1
        if status is UpgradeStatus.UNAFFORDABLE:
            session.bus.publish(
                UPGRADE_UNAVAILABLE,
                from_tier=session.stats.tier,
                to_tier=target,
                reason="insufficient resources or tokens",
            )
            return False
        if status is not UpgradeStatus.AVAILABLE:
            return False
        if not session.fsm.begin(Trigger.UPGRADE):
            return False
        session.pending_tier = target
        session.timers.start(
            UPGRADE_TIMER, session.config.ticks(session.config.upgrade_duration_ms)
        )
        session.bus.publish(
            UPGRADE_STARTED, from_tier=session.stats.tier, to_tier=target
        )
        return True

    def _complete(self, session: Session, ctx: TickContext, timer: Timer) -> None:
        config = session.config
        target = session.pending_tier
        session.pending_tier = None
        assert target is not None, "upgrade timer fired without a pending tier"

        definition = session.catalog.get(target)
        cost = definition.upgrade_cost
        old_tier = session.stats.tier

        charged: dict[str, float] = {}
        if config.charge_upgrades:
            if not can_afford(session, cost):
                session.last_error = f"Cannot afford upgrade to tier {target}"
                session.fsm.fire(Trigger.UPGRADE_FAILED)
                session.bus.publish(
                    UPGRADE_FAILED,
                    from_tier=old_tier,
                    to_tier=target,
                    reason=session.last_error,
                )
                return
            minerals = cost.minerals()
            session.cargo.deduct(minerals)
            session.balance -= cost.tokens
            charged = {k: v for k, v in minerals.items() if v}
            if cost.tokens:
                charged["tokens"] = cost.tokens

        base = definition.base_stats
        session.stats = Stats.from_base(target, base)
        session.cargo.capacity = dict(base.max_capacity)
        session.regen.invalidate()
        session.regen.active = False

        session.fsm.fire(Trigger.UPGRADE_COMPLETE)
        session.bus.publish(
            UPGRADED,
            from_tier=old_tier,
            to_tier=target,
            name=definition.name,
            charged=charged,
        )
        session.timers.start(SETTLE_TIMER, config.ticks(config.settle_ms))
