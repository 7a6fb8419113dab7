"""Submarine tier catalog: stat and cost profiles per equipment tier."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from tick_mining.types import MINERALS, UnknownTierError


@dataclass(frozen=True)
class BaseStats:
    """Stats a player receives when a tier is installed.

    Attributes:
        energy: Maximum (and starting) energy.
        max_capacity: Storage ceiling per mineral.
        depth: Rated operating depth in metres. Display only.
        speed: Movement speed multiplier.
        mining_rate: Per-action yield multiplier.
        health: Hull points. Display only.
    """

    energy: float
    max_capacity: dict[str, int]
    depth: int
    speed: float
    mining_rate: float
    health: int = 100

    def __post_init__(self) -> None:
        if self.energy <= 0:
            raise ValueError(f"energy must be > 0, got {self.energy}")
        missing = [m for m in MINERALS if m not in self.max_capacity]
        if missing:
            raise ValueError(f"max_capacity missing minerals: {missing}")
        for name, cap in self.max_capacity.items():
            if cap < 0:
                raise ValueError(f"max_capacity[{name!r}] must be >= 0, got {cap}")


@dataclass(frozen=True)
class UpgradeCost:
    """Price of moving to a tier. Minerals come from cargo, tokens from the wallet."""

    nickel: int = 0
    cobalt: int = 0
    copper: int = 0
    manganese: int = 0
    tokens: float = 0

    def __post_init__(self) -> None:
        for name in (*MINERALS, "tokens"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cost must be >= 0")

    def minerals(self) -> dict[str, int]:
        """Mineral requirements as a mapping, zero entries included."""
        return {name: getattr(self, name) for name in MINERALS}


@dataclass(frozen=True)
class TierDefinition:
    tier: int
    name: str
    base_stats: BaseStats
    upgrade_cost: UpgradeCost = field(default_factory=UpgradeCost)
    description: str = ""
    special_ability: str | None = None

    def __post_init__(self) -> None:
        if self.tier < 1:
            raise ValueError(f"tier must be >= 1, got {self.tier}")


class TierCatalog:
    """Ordered, contiguous table of tiers 1..N. Never mutated after construction."""

    def __init__(self, definitions: Iterable[TierDefinition]) -> None:
        ordered = sorted(definitions, key=lambda d: d.tier)
        if not ordered:
            raise ValueError("TierCatalog requires at least one tier")
        for expected, defn in enumerate(ordered, start=1):
            if defn.tier != expected:
                raise ValueError(
                    f"Tiers must be contiguous from 1; expected {expected}, got {defn.tier}"
                )
        # Held cargo survives an upgrade, so capacity may only grow.
        for prev, defn in zip(ordered, ordered[1:]):
            for kind, cap in defn.base_stats.max_capacity.items():
                if cap < prev.base_stats.max_capacity[kind]:
                    raise ValueError(
                        f"Tier {defn.tier} {kind} capacity {cap} is below "
                        f"tier {prev.tier}'s {prev.base_stats.max_capacity[kind]}"
                    )
        self._tiers: dict[int, TierDefinition] = {d.tier: d for d in ordered}

    def get(self, tier: int) -> TierDefinition:
        """Look up a tier. Raises UnknownTierError if absent."""
        try:
            return self._tiers[tier]
        except KeyError:
            raise UnknownTierError(tier) from None

    def has(self, tier: int) -> bool:
        return tier in self._tiers

    def next(self, tier: int) -> TierDefinition | None:
        """The tier after ``tier``, or None at the maximum."""
        return self._tiers.get(tier + 1)

    def higher(self, tier: int) -> list[TierDefinition]:
        """All tiers strictly above ``tier``, ascending."""
        return [d for t, d in self._tiers.items() if t > tier]

    @property
    def max_tier(self) -> int:
        return len(self._tiers)

    def is_max(self, tier: int) -> bool:
        return tier >= self.max_tier

    def __len__(self) -> int:
        return len(self._tiers)

    def __iter__(self) -> Iterator[TierDefinition]:
        return iter(self._tiers.values())


def _caps(nickel: int, cobalt: int, copper: int, manganese: int) -> dict[str, int]:
    return {"nickel": nickel, "cobalt": cobalt, "copper": copper, "manganese": manganese}


# Reference content. The economy is token-priced; mineral costs stay at zero.
SUBMARINE_TIERS: tuple[TierDefinition, ...] = (
    TierDefinition(
        1, "Nautilus I",
        BaseStats(100, _caps(100, 50, 50, 25), 1000, 1.0, 1.0, 100),
        UpgradeCost(tokens=100),
        "Basic exploration submarine with limited storage capacity.",
    ),
    TierDefinition(
        2, "Nautilus II",
        BaseStats(120, _caps(150, 75, 75, 40), 1200, 1.3, 1.2, 125),
        UpgradeCost(tokens=200),
        "Improved submarine with enhanced storage and durability.",
    ),
    TierDefinition(
        3, "Abyssal Explorer",
        BaseStats(140, _caps(200, 100, 100, 60), 1500, 1.6, 1.4, 150),
        UpgradeCost(tokens=350),
        "Specialized deep-sea submarine with reinforced hull.",
    ),
    TierDefinition(
        4, "Mariana Miner",
        BaseStats(160, _caps(300, 150, 150, 80), 1800, 2.0, 1.6, 175),
        UpgradeCost(tokens=500),
        "Heavy-duty mining submarine with expanded cargo holds.",
    ),
    TierDefinition(
        5, "Hydrothermal Hunter",
        BaseStats(180, _caps(400, 200, 200, 100), 2200, 2.4, 1.8, 200),
        UpgradeCost(tokens=750),
        "Advanced submarine with heat-resistant plating for volcanic regions.",
    ),
    TierDefinition(
        6, "Pressure Pioneer",
        BaseStats(220, _caps(500, 250, 250, 125), 2600, 2.8, 2.0, 250),
        UpgradeCost(tokens=1000),
        "Cutting-edge submarine designed for extreme depths.",
        "Pressure Resistance: Immune to depth damage",
    ),
    TierDefinition(
        7, "Quantum Diver",
        BaseStats(260, _caps(650, 325, 325, 160), 3000, 3.2, 2.2, 300),
        UpgradeCost(tokens=1500),
        "Experimental submarine with quantum-stabilized hull.",
        "Quantum Scanning: Reveals hidden resource nodes",
    ),
    TierDefinition(
        8, "Titan Voyager",
        BaseStats(300, _caps(820, 410, 410, 205), 3500, 3.6, 2.4, 350),
        UpgradeCost(tokens=2000),
        "Massive submarine with reinforced titanium hull and expanded storage bays.",
        "Titanium Plating: 25% damage reduction",
    ),
    TierDefinition(
        9, "Oceanic Behemoth",
        BaseStats(340, _caps(990, 495, 495, 248), 4000, 4.0, 2.6, 400),
        UpgradeCost(tokens=2750),
        "Colossal mining vessel with automated resource processing systems.",
        "Auto-Processing: Resources are refined automatically",
    ),
    TierDefinition(
        10, "Abyssal Fortress",
        BaseStats(400, _caps(1160, 580, 580, 290), 5000, 4.5, 2.8, 500),
        UpgradeCost(tokens=3500),
        "Fortress-class submarine built for the deepest ocean trenches.",
        "Fortress Mode: Immobile but 3x mining rate",
    ),
    TierDefinition(
        11, "Kraken's Bane",
        BaseStats(460, _caps(1330, 665, 665, 333), 6000, 5.0, 3.0, 600),
        UpgradeCost(tokens=4500),
        "Legendary submarine designed to withstand the most hostile environments.",
        "Kraken Slayer: Immune to all environmental hazards",
    ),
    TierDefinition(
        12, "Void Walker",
        BaseStats(520, _caps(1500, 750, 750, 375), 7000, 5.5, 3.2, 700),
        UpgradeCost(tokens=6000),
        "Mysterious submarine that seems to bend space and time around it.",
        "Void Phase: Can teleport short distances",
    ),
    TierDefinition(
        13, "Stellar Harvester",
        BaseStats(600, _caps(1670, 835, 835, 418), 8000, 6.0, 3.4, 800),
        UpgradeCost(tokens=7500),
        "Advanced submarine powered by miniaturized stellar technology.",
        "Stellar Power: Unlimited energy in sunlight zones",
    ),
    TierDefinition(
        14, "Cosmic Dreadnought",
        BaseStats(700, _caps(1840, 920, 920, 460), 9000, 6.5, 3.6, 900),
        UpgradeCost(tokens=9000),
        "The penultimate submarine, incorporating alien technology.",
        "Cosmic Resonance: Attracts rare resources",
    ),
    TierDefinition(
        15, "Leviathan",
        BaseStats(1000, _caps(2000, 1000, 1000, 500), 10000, 8.0, 5.0, 1000),
        UpgradeCost(tokens=0),
        "The ultimate deep-sea mining vessel, unmatched in all aspects.",
        "Omnimining: Can mine all resources simultaneously",
    ),
)


def default_catalog() -> TierCatalog:
    """The fifteen reference submarine tiers."""
    return TierCatalog(SUBMARINE_TIERS)
