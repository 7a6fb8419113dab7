"""Session: the explicit context object every system operates on."""
from __future__ import annotations

from typing import Any, Iterable

from tick_mining.components import (
    Cargo,
    MovementIntent,
    OtherPlayer,
    Position,
    ResourceNode,
    Stats,
)
from tick_mining.config import MiningConfig
from tick_mining.energy import EnergyRegen
from tick_mining.field import ResourceField
from tick_mining.schedule import TimerSet
from tick_mining.signals import STATE_CHANGED, SignalBus
from tick_mining.state import (
    SETTLE_TIMER,
    GameState,
    GameStateMachine,
    Trigger,
    settle,
)
from tick_mining.tiers import TierCatalog, default_catalog


class Session:
    """All mutable state of one play session.

    Systems and action handlers receive the session explicitly; nothing in
    the package keeps module-level game state. The engine that owns the
    session is the only caller that mutates it.
    """

    def __init__(
        self,
        config: MiningConfig | None = None,
        catalog: TierCatalog | None = None,
        nodes: Iterable[ResourceNode] = (),
        tier: int = 1,
        balance: float = 0.0,
        position: Position | None = None,
    ) -> None:
        self.config: MiningConfig = config if config is not None else MiningConfig()
        self.catalog: TierCatalog = catalog if catalog is not None else default_catalog()

        base = self.catalog.get(tier).base_stats
        self.stats = Stats.from_base(tier, base)
        self.cargo = Cargo(capacity=dict(base.max_capacity))
        self.position = position if position is not None else Position(
            y=self.config.min_altitude
        )
        self.intent = MovementIntent()
        self.field = ResourceField(nodes)
        self.balance: float = balance

        self.fsm = GameStateMachine()
        self.timers = TimerSet()
        self.bus = SignalBus()
        self.regen = EnergyRegen()
        self.timers.register(SETTLE_TIMER, settle)
        self.fsm.on_transition(self._publish_transition)

        self.target: str | None = None
        self.pending_node: str | None = None
        self.pending_tier: int | None = None

        self.storage_alert: bool = False
        self.storage_warning: bool = False
        self.energy_alert: bool = False
        self.last_error: str | None = None
        self.inventory_open: bool = False
        self.upgrade_menu_open: bool = False

        self.sweep_angle: float = 0.0
        self.visible_nodes: frozenset[str] = frozenset()
        self.other_players: list[OtherPlayer] = []
        self.contacts: frozenset[str] = frozenset()

    def _publish_transition(
        self, old: GameState, new: GameState, trigger: Trigger
    ) -> None:
        self.bus.publish(
            STATE_CHANGED, old=old.value, new=new.value, trigger=trigger.value
        )

    @property
    def state(self) -> GameState:
        return self.fsm.state

    @property
    def tier(self) -> int:
        return self.stats.tier

    def target_node(self) -> ResourceNode | None:
        if self.target is None:
            return None
        return self.field.get(self.target)

    def view(self) -> dict[str, Any]:
        """Plain-data snapshot of everything the presentation layer reads."""
        return {
            "state": self.fsm.state.value,
            "position": {
                "x": self.position.x,
                "y": self.position.y,
                "z": self.position.z,
                "heading": self.position.heading,
            },
            "stats": {
                "energy": self.stats.energy,
                "max_energy": self.stats.max_energy,
                "depth": self.stats.depth,
                "speed": self.stats.speed,
                "mining_rate": self.stats.mining_rate,
                "tier": self.stats.tier,
                "health": self.stats.health,
            },
            "resources": self.cargo.resources(),
            "capacity": {
                kind: {"used": self.cargo.used(kind), "max": cap}
                for kind, cap in self.cargo.capacity.items()
            },
            "storage_percentage": self.cargo.fill_percentage(),
            "balance": self.balance,
            "target": self.target,
            "nodes": [
                {
                    "id": n.id,
                    "x": n.x,
                    "y": n.y,
                    "kind": n.kind,
                    "amount": n.amount,
                    "size": n.size,
                    "depleted": n.depleted,
                }
                for n in self.field
            ],
            "sonar": {
                "sweep_angle": self.sweep_angle,
                "visible": sorted(self.visible_nodes),
                "contacts": sorted(self.contacts),
            },
            "alerts": {
                "storage_full": self.storage_alert,
                "storage_warning": self.storage_warning,
                "energy_depleted": self.energy_alert,
                "last_error": self.last_error,
            },
            "inventory_open": self.inventory_open,
            "upgrade_menu_open": self.upgrade_menu_open,
        }
