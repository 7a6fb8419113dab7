"""tick-mining - Deep-sea mining and progression simulation on a fixed-timestep engine."""
from __future__ import annotations

from tick_mining.clock import Clock
from tick_mining.commands import (
    CommandQueue,
    Mine,
    ToggleInventory,
    ToggleUpgradeMenu,
    TradeAll,
    Upgrade,
    make_command_system,
)
from tick_mining.components import (
    Cargo,
    MovementIntent,
    OtherPlayer,
    Position,
    ResourceNode,
    Stats,
)
from tick_mining.config import MiningConfig, config_from_mapping, load_config
from tick_mining.energy import (
    EnergyRegen,
    fill_time_seconds,
    make_energy_system,
    regen_per_second,
)
from tick_mining.engine import Engine
from tick_mining.field import ResourceField, generate_nodes
from tick_mining.game import Simulation, build_simulation
from tick_mining.input import DEFAULT_KEYMAP, KeyMap
from tick_mining.mining import MiningPlan, MiningProcessor, plan_mining
from tick_mining.movement import integrate, make_movement_system
from tick_mining.proximity import find_target, make_proximity_system
from tick_mining.schedule import Timer, TimerSet, make_timer_system
from tick_mining.session import Session
from tick_mining.signals import SignalBus, make_signal_system
from tick_mining.sonar import (
    SonarSweep,
    bearing,
    in_trailing_arc,
    make_sonar_system,
    sweep_angle,
)
from tick_mining.state import TRANSITIONS, GameState, GameStateMachine, Trigger
from tick_mining.tiers import (
    SUBMARINE_TIERS,
    BaseStats,
    TierCatalog,
    TierDefinition,
    UpgradeCost,
    default_catalog,
)
from tick_mining.trade import (
    MockTradeClient,
    TradeClient,
    TradeError,
    TradeRequest,
    TradeResult,
    TradeSystem,
    make_trade_system,
)
from tick_mining.types import (
    MINERALS,
    ConfigError,
    InvalidTransitionError,
    TickContext,
    UnknownNodeError,
    UnknownTierError,
)
from tick_mining.upgrade import UpgradeOption, UpgradeProcessor, UpgradeStatus

__all__ = [
    "BaseStats",
    "Cargo",
    "Clock",
    "CommandQueue",
    "ConfigError",
    "DEFAULT_KEYMAP",
    "EnergyRegen",
    "Engine",
    "GameState",
    "GameStateMachine",
    "InvalidTransitionError",
    "KeyMap",
    "MINERALS",
    "Mine",
    "MiningConfig",
    "MiningPlan",
    "MiningProcessor",
    "MockTradeClient",
    "MovementIntent",
    "OtherPlayer",
    "Position",
    "ResourceField",
    "ResourceNode",
    "SUBMARINE_TIERS",
    "Session",
    "SignalBus",
    "Simulation",
    "SonarSweep",
    "Stats",
    "TRANSITIONS",
    "TickContext",
    "TierCatalog",
    "TierDefinition",
    "Timer",
    "TimerSet",
    "ToggleInventory",
    "ToggleUpgradeMenu",
    "TradeAll",
    "TradeClient",
    "TradeError",
    "TradeRequest",
    "TradeResult",
    "TradeSystem",
    "Trigger",
    "UnknownNodeError",
    "UnknownTierError",
    "Upgrade",
    "UpgradeCost",
    "UpgradeOption",
    "UpgradeProcessor",
    "UpgradeStatus",
    "bearing",
    "build_simulation",
    "config_from_mapping",
    "default_catalog",
    "fill_time_seconds",
    "find_target",
    "generate_nodes",
    "in_trailing_arc",
    "integrate",
    "load_config",
    "make_command_system",
    "make_energy_system",
    "make_movement_system",
    "make_proximity_system",
    "make_signal_system",
    "make_sonar_system",
    "make_timer_system",
    "make_trade_system",
    "plan_mining",
    "regen_per_second",
    "sweep_angle",
]
