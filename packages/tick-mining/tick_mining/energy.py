"""Energy regeneration scheduled on its own interval."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from tick_mining.signals import ENERGY_FULL

if TYPE_CHECKING:
    from tick_mining.config import MiningConfig
    from tick_mining.session import Session
    from tick_mining.types import TickContext


def fill_time_seconds(
    tier: int, tier_count: int, min_fill: float, max_fill: float
) -> float:
    """Seconds to refill from empty, interpolated linearly across tiers.

    Tier 1 takes ``min_fill``; the last tier takes ``max_fill``.
    """
    if tier_count <= 1:
        return min_fill
    ratio = (tier - 1) / (tier_count - 1)
    ratio = min(1.0, max(0.0, ratio))
    return min_fill + (max_fill - min_fill) * ratio


def regen_per_second(max_energy: float, fill_time: float) -> float:
    if fill_time <= 0:
        raise ValueError(f"fill_time must be positive, got {fill_time}")
    return max_energy / fill_time


@dataclass
class EnergyRegen:
    """Regeneration bookkeeping for one session.

    Attributes:
        rate: Energy per second, valid for ``rate_tier``.
        rate_tier: Tier the cached rate was derived for; 0 when unset.
        active: Latch for the ``"depleted"`` policy.
        elapsed: Ticks since the last regeneration step.
    """

    rate: float = 0.0
    rate_tier: int = 0
    active: bool = False
    elapsed: int = 0

    def invalidate(self) -> None:
        self.rate_tier = 0

    def rate_for(self, session: Session) -> float:
        """Cached rate, re-derived only when the tier changes."""
        tier = session.stats.tier
        if tier != self.rate_tier:
            config = session.config
            fill = fill_time_seconds(
                tier,
                len(session.catalog),
                config.min_fill_seconds,
                config.max_fill_seconds,
            )
            self.rate = regen_per_second(session.stats.max_energy, fill)
            self.rate_tier = tier
        return self.rate


def _should_regenerate(regen: EnergyRegen, session: Session, config: MiningConfig) -> bool:
    stats = session.stats
    if stats.energy >= stats.max_energy:
        regen.active = False
        return False
    if config.energy_regen_policy == "continuous":
        return True
    if stats.energy <= 0:
        regen.active = True
    return regen.active


def make_energy_system() -> Callable[[Session, TickContext], None]:
    """Return a system that restores energy every ``energy_tick_ms``.

    Each step adds ``rate`` times the interval's virtual seconds (the
    interval rounded to whole ticks), capped at the maximum. Reaching the
    maximum publishes ``energy_full``.
    """

    def energy_system(session: Session, ctx: TickContext) -> None:
        config = session.config
        regen = session.regen
        stats = session.stats

        # Latch as soon as energy bottoms out, not only on interval boundaries.
        if stats.energy <= 0:
            regen.active = True

        interval = config.ticks(config.energy_tick_ms)
        regen.elapsed += 1
        if regen.elapsed < interval:
            return
        regen.elapsed = 0

        if not _should_regenerate(regen, session, config):
            return
        # Gain covers the virtual time actually elapsed, not energy_tick_ms.
        gain = regen.rate_for(session) * interval * config.tick_ms / 1000.0
        stats.energy = min(stats.max_energy, stats.energy + gain)
        if stats.energy >= stats.max_energy:
            regen.active = False
            session.bus.publish(
                ENERGY_FULL, tier=stats.tier, energy=stats.energy
            )

    return energy_system
