"""Simulation configuration dataclass and TOML loader."""
from __future__ import annotations

import dataclasses
import math
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tick_mining.types import ConfigError

REGEN_POLICIES = ("depleted", "continuous")


@dataclass(frozen=True)
class MiningConfig:
    """Immutable tuning constants for one play session.

    Durations are wall-clock milliseconds of virtual time; the engine
    converts them to ticks with :meth:`ticks`.

    Attributes:
        tick_ms: Length of one simulation tick (movement cadence).
        bounds_xz: Half-extent of the horizontal world square.
        min_altitude: Vertical floor, also the lower world bound.
        max_altitude: Vertical ceiling.
        speed_scale: Units moved per tick per point of ``Stats.speed``.
        turn_rate: Radians turned per tick while steering.
        proximity_radius: Planar distance under which a node is targetable.
        mining_duration_ms: Latency of one mining transaction.
        mining_energy_cost: Energy spent per completed mining action.
        mining_yield_cap: Per-action cap at mining rate 1.0.
        settle_ms: Delay from a result state back to idle.
        storage_alert_ms: How long the storage-full alert stays raised.
        storage_warning_percent: Fill percentage at which the near-full
            warning is raised (below 100).
        storage_warning_ms: How long the near-full warning stays raised.
        energy_alert_ms: How long the energy-depleted alert stays raised.
        upgrade_duration_ms: Latency of one upgrade transaction.
        charge_upgrades: Deduct the upgrade cost on completion.
        energy_tick_ms: Regeneration interval.
        min_fill_seconds: Full refill time at the first tier.
        max_fill_seconds: Full refill time at the last tier.
        energy_regen_policy: ``"depleted"`` or ``"continuous"``.
        sonar_rate: Sweep speed in radians per second.
        sonar_arc: Width of the trailing lit arc in radians.
        sonar_range: Maximum distance at which the sonar shows anything.
        trade_timeout_ms: Collaborator deadline for a trade request.
        trade_pool_size: Worker threads used for trade requests.
    """

    tick_ms: float = 16.0
    bounds_xz: float = 25.0
    min_altitude: float = 1.0
    max_altitude: float = 10.0
    speed_scale: float = 0.05
    turn_rate: float = 0.02
    proximity_radius: float = 3.0
    mining_duration_ms: int = 2000
    mining_energy_cost: float = 5.0
    mining_yield_cap: int = 20
    settle_ms: int = 2000
    storage_alert_ms: int = 2000
    storage_warning_percent: int = 90
    storage_warning_ms: int = 5000
    energy_alert_ms: int = 5000
    upgrade_duration_ms: int = 2000
    charge_upgrades: bool = True
    energy_tick_ms: int = 1000
    min_fill_seconds: float = 20 * 60
    max_fill_seconds: float = 45 * 60
    energy_regen_policy: str = "depleted"
    sonar_rate: float = 1.0
    sonar_arc: float = 1.0
    sonar_range: float = 50.0
    trade_timeout_ms: int = 10000
    trade_pool_size: int = 1

    def __post_init__(self) -> None:
        if self.tick_ms <= 0:
            raise ConfigError(f"tick_ms must be positive, got {self.tick_ms}")
        if self.bounds_xz <= 0:
            raise ConfigError(f"bounds_xz must be positive, got {self.bounds_xz}")
        if self.min_altitude > self.max_altitude:
            raise ConfigError(
                f"min_altitude {self.min_altitude} exceeds max_altitude {self.max_altitude}"
            )
        if self.proximity_radius <= 0:
            raise ConfigError("proximity_radius must be positive")
        if self.mining_yield_cap < 1:
            raise ConfigError("mining_yield_cap must be >= 1")
        if self.mining_energy_cost < 0:
            raise ConfigError("mining_energy_cost must be >= 0")
        if not 0 < self.storage_warning_percent < 100:
            raise ConfigError("storage_warning_percent must be within (0, 100)")
        if not 0 < self.min_fill_seconds <= self.max_fill_seconds:
            raise ConfigError(
                "fill times must satisfy 0 < min_fill_seconds <= max_fill_seconds"
            )
        if self.energy_regen_policy not in REGEN_POLICIES:
            raise ConfigError(
                f"energy_regen_policy must be one of {REGEN_POLICIES}, "
                f"got {self.energy_regen_policy!r}"
            )
        if not 0 < self.sonar_arc < 2 * math.pi:
            raise ConfigError("sonar_arc must be within (0, 2*pi)")
        if self.trade_pool_size < 1:
            raise ConfigError("trade_pool_size must be >= 1")
        for name in (
            "mining_duration_ms", "settle_ms", "storage_alert_ms",
            "storage_warning_ms", "energy_alert_ms", "upgrade_duration_ms",
            "energy_tick_ms", "trade_timeout_ms",
        ):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    @property
    def tps(self) -> float:
        """Ticks per second implied by ``tick_ms``."""
        return 1000.0 / self.tick_ms

    def ticks(self, ms: float) -> int:
        """Convert a duration in milliseconds to a whole number of ticks (>= 1)."""
        return max(1, round(ms / self.tick_ms))


def config_from_mapping(data: dict[str, Any]) -> MiningConfig:
    """Build a config from a flat mapping. Unknown keys raise ConfigError."""
    known = {f.name for f in dataclasses.fields(MiningConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
    return MiningConfig(**data)


def load_config(path: str | Path) -> MiningConfig:
    """Read a TOML file and return its ``[mining]`` table as a MiningConfig.

    A file without a ``[mining]`` table yields the defaults.
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    section = data.get("mining", {})
    if not isinstance(section, dict):
        raise ConfigError("[mining] must be a table")
    return config_from_mapping(section)
