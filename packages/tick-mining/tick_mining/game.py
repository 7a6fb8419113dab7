"""Simulation facade: one session, its engine and every system, wired."""
from __future__ import annotations

import os
import random
from typing import Any, Iterable

from tick_mining.commands import (
    CommandQueue,
    Mine,
    ToggleInventory,
    ToggleUpgradeMenu,
    TradeAll,
    Upgrade,
    make_command_system,
)
from tick_mining.components import OtherPlayer, ResourceNode
from tick_mining.config import MiningConfig
from tick_mining.energy import make_energy_system
from tick_mining.engine import Engine
from tick_mining.field import generate_nodes
from tick_mining.input import DEFAULT_KEYMAP, KeyMap
from tick_mining.mining import MiningProcessor
from tick_mining.movement import make_movement_system
from tick_mining.proximity import make_proximity_system
from tick_mining.schedule import make_timer_system
from tick_mining.session import Session
from tick_mining.signals import make_signal_system
from tick_mining.sonar import make_sonar_system
from tick_mining.tiers import TierCatalog
from tick_mining.trade import MockTradeClient, TradeClient, TradeSystem, make_trade_system
from tick_mining.types import TickContext
from tick_mining.upgrade import UpgradeProcessor


class Simulation:
    """Input and output surface of a running session.

    Action methods enqueue commands; they take effect on the next tick.
    Use :func:`build_simulation` to create one.
    """

    def __init__(
        self,
        engine: Engine,
        commands: CommandQueue,
        mining: MiningProcessor,
        upgrades: UpgradeProcessor,
        trade: TradeSystem,
        keymap: KeyMap,
    ) -> None:
        self._engine = engine
        self._commands = commands
        self.mining = mining
        self.upgrades = upgrades
        self.trade_system = trade
        self._keymap = keymap

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def session(self) -> Session:
        return self._engine.session

    @property
    def commands(self) -> CommandQueue:
        return self._commands

    # --- Actions ---

    def mine(self) -> None:
        self._commands.enqueue(Mine())

    def trade(self) -> None:
        self._commands.enqueue(TradeAll())

    def upgrade(self, target_tier: int | None = None) -> None:
        self._commands.enqueue(Upgrade(target_tier))

    def toggle_inventory(self) -> None:
        self._commands.enqueue(ToggleInventory())

    def toggle_upgrade_menu(self) -> None:
        self._commands.enqueue(ToggleUpgradeMenu())

    # --- Continuous input ---

    def set_intent(self, **flags: bool) -> None:
        """Set movement flags by name, e.g. ``set_intent(forward=True)``."""
        intent = self.session.intent
        for name, value in flags.items():
            if not hasattr(intent, name):
                raise AttributeError(f"Unknown movement flag {name!r}")
            setattr(intent, name, bool(value))

    def press(self, key: str) -> bool:
        """Handle a key press. Returns False for an unbound key."""
        flag = self._keymap.movement_flag(key)
        if flag is not None:
            setattr(self.session.intent, flag, True)
            return True
        cmd = self._keymap.command(key)
        if cmd is None:
            return False
        self._commands.enqueue(cmd)
        return True

    def release(self, key: str) -> bool:
        flag = self._keymap.movement_flag(key)
        if flag is None:
            return False
        setattr(self.session.intent, flag, False)
        return True

    # --- Collaborator feeds ---

    def set_balance(self, balance: float) -> None:
        """Mirror the wallet's token balance."""
        self.session.balance = balance

    def set_other_players(self, players: Iterable[OtherPlayer]) -> None:
        self.session.other_players = list(players)

    # --- Time ---

    def step(self) -> bool:
        return self._engine.step()

    def run(self, n: int) -> int:
        return self._engine.run(n)

    def run_for(self, ms: float) -> int:
        return self._engine.run_for(ms)

    def view(self) -> dict[str, Any]:
        return self.session.view()

    def shutdown(self) -> None:
        self.trade_system.shutdown()


def _toggle_inventory(cmd: ToggleInventory, session: Session, ctx: TickContext) -> bool:
    session.inventory_open = not session.inventory_open
    return True


def _toggle_upgrade_menu(
    cmd: ToggleUpgradeMenu, session: Session, ctx: TickContext
) -> bool:
    session.upgrade_menu_open = not session.upgrade_menu_open
    return True


def build_simulation(
    config: MiningConfig | None = None,
    catalog: TierCatalog | None = None,
    nodes: Iterable[ResourceNode] | None = None,
    trade_client: TradeClient | None = None,
    seed: int | None = None,
    balance: float = 0.0,
    tier: int = 1,
    keymap: KeyMap = DEFAULT_KEYMAP,
) -> Simulation:
    """Create a session and engine with every system installed in order.

    Without ``nodes`` a field is generated from ``seed``; without a
    ``trade_client`` a :class:`MockTradeClient` is used.
    """
    config = config if config is not None else MiningConfig()
    if seed is None:
        seed = int.from_bytes(os.urandom(8))
    if nodes is None:
        nodes = generate_nodes(random.Random(seed), bound=config.bounds_xz)

    session = Session(
        config=config, catalog=catalog, nodes=nodes, tier=tier, balance=balance
    )
    engine = Engine(session, seed=seed)

    mining = MiningProcessor(session)
    upgrades = UpgradeProcessor(session)
    trade = make_trade_system(
        session, trade_client if trade_client is not None else MockTradeClient()
    )

    queue = CommandQueue()
    queue.handle(Mine, lambda cmd, s, ctx: mining.request())
    queue.handle(TradeAll, lambda cmd, s, ctx: trade.request())
    queue.handle(Upgrade, lambda cmd, s, ctx: upgrades.request(cmd.target_tier))
    queue.handle(ToggleInventory, _toggle_inventory)
    queue.handle(ToggleUpgradeMenu, _toggle_upgrade_menu)

    engine.add_system(make_command_system(queue))
    engine.add_system(make_movement_system())
    engine.add_system(make_proximity_system())
    engine.add_system(make_timer_system(session.timers))
    engine.add_system(trade)
    engine.add_system(make_energy_system())
    engine.add_system(make_sonar_system())
    engine.add_system(make_signal_system(session.bus))

    return Simulation(engine, queue, mining, upgrades, trade, keymap)
