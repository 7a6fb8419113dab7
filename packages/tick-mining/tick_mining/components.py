"""Player and world state components."""
from __future__ import annotations

from dataclasses import dataclass, field

from tick_mining.tiers import BaseStats
from tick_mining.types import MINERALS, check_mineral


@dataclass
class Position:
    """Player position. ``y`` is altitude; the seabed plane is (x, z)."""

    x: float = 0.0
    y: float = 1.0
    z: float = 0.0
    heading: float = 0.0


@dataclass
class MovementIntent:
    """Directional flags held by the input collaborator."""

    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False


@dataclass
class Stats:
    energy: float
    max_energy: float
    depth: int
    speed: float
    mining_rate: float
    tier: int
    health: int = 100

    @classmethod
    def from_base(cls, tier: int, base: BaseStats) -> Stats:
        """Fresh stats for ``tier`` with energy at its maximum."""
        return cls(
            energy=base.energy,
            max_energy=base.energy,
            depth=base.depth,
            speed=base.speed,
            mining_rate=base.mining_rate,
            tier=tier,
            health=base.health,
        )


def _zero_minerals() -> dict[str, int]:
    return {m: 0 for m in MINERALS}


@dataclass
class Cargo:
    """Held minerals and their per-mineral ceilings.

    ``held`` is the single authoritative quantity; the "used" side of the
    capacity display is read from it.

    Attributes:
        held: Mineral name -> amount carried.
        capacity: Mineral name -> maximum storable amount.
    """

    held: dict[str, int] = field(default_factory=_zero_minerals)
    capacity: dict[str, int] = field(default_factory=_zero_minerals)

    def used(self, kind: str) -> int:
        return self.held.get(kind, 0)

    def remaining(self, kind: str) -> int:
        return max(0, self.capacity.get(kind, 0) - self.held.get(kind, 0))

    def total_used(self) -> int:
        return sum(self.held.get(m, 0) for m in MINERALS)

    def total_capacity(self) -> int:
        return sum(self.capacity.get(m, 0) for m in MINERALS)

    def is_full(self) -> bool:
        return self.total_used() >= self.total_capacity()

    def fill_percentage(self) -> int:
        total = self.total_capacity()
        if total == 0:
            return 0
        return round(self.total_used() / total * 100)

    def add(self, kind: str, amount: int) -> int:
        """Store up to ``amount``, never past capacity. Returns amount stored."""
        check_mineral(kind)
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        actual = min(amount, self.remaining(kind))
        if actual > 0:
            self.held[kind] = self.held.get(kind, 0) + actual
        return actual

    def has_all(self, requirements: dict[str, int]) -> bool:
        for name, needed in requirements.items():
            if self.held.get(name, 0) < needed:
                return False
        return True

    def deduct(self, requirements: dict[str, int]) -> bool:
        """Remove every requirement, or nothing. Returns False if insufficient."""
        if not self.has_all(requirements):
            return False
        for name, needed in requirements.items():
            if needed:
                self.held[name] -= needed
        return True

    def clear(self) -> None:
        for m in MINERALS:
            self.held[m] = 0

    def resources(self) -> dict[str, int]:
        return {m: self.held.get(m, 0) for m in MINERALS}


@dataclass
class ResourceNode:
    """A depletable mineral deposit. ``x``/``y`` are world x/z coordinates."""

    id: str
    x: float
    y: float
    kind: str
    amount: int
    size: float = 20.0
    depleted: bool = False

    def __post_init__(self) -> None:
        check_mineral(self.kind)
        if self.amount < 0:
            self.amount = 0
        self.depleted = self.amount == 0


@dataclass(frozen=True)
class OtherPlayer:
    """Another diver, supplied read-only by the multiplayer collaborator."""

    id: str
    x: float
    z: float
    heading: float = 0.0
    tier: int = 1
    username: str = ""
