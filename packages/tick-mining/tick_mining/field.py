"""ResourceField: the ordered set of depletable mineral nodes."""
from __future__ import annotations

import random as _random_mod
from typing import Iterable, Iterator

from tick_mining.components import ResourceNode
from tick_mining.types import MINERALS, UnknownNodeError


class ResourceField:
    """Nodes keyed by id, iterated in insertion order.

    Nodes are never removed; depletion is a terminal flag so ids stay
    valid for targeting and sonar display.
    """

    def __init__(self, nodes: Iterable[ResourceNode] = ()) -> None:
        self._nodes: dict[str, ResourceNode] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: ResourceNode) -> None:
        """Register a node. Raises ValueError on a duplicate id."""
        if node.id in self._nodes:
            raise ValueError(f"Duplicate resource node id {node.id!r}")
        self._nodes[node.id] = node

    def get(self, node_id: str) -> ResourceNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def has(self, node_id: str) -> bool:
        return node_id in self._nodes

    def extract(self, node_id: str, amount: int) -> int:
        """Take up to ``amount`` from a node. Returns the amount taken.

        Amounts only ever decrease and a depleted node stays depleted.
        """
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        node = self.get(node_id)
        taken = min(amount, node.amount)
        node.amount -= taken
        if node.amount <= 0:
            node.depleted = True
        return taken

    def active(self) -> list[ResourceNode]:
        """Non-depleted nodes in field order."""
        return [n for n in self._nodes.values() if not n.depleted]

    def remaining(self) -> dict[str, int]:
        """Total unmined amount per mineral."""
        totals = {m: 0 for m in MINERALS}
        for node in self._nodes.values():
            totals[node.kind] += node.amount
        return totals

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


def generate_nodes(
    rng: _random_mod.Random,
    count: int = 30,
    bound: float = 25.0,
    margin: float = 2.0,
    amount_range: tuple[int, int] = (5, 20),
    size_range: tuple[float, float] = (15.0, 25.0),
) -> list[ResourceNode]:
    """Scatter ``count`` nodes uniformly inside the horizontal world square.

    Stands in for the world-generation collaborator when none is supplied.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    lo, hi = amount_range
    extent = max(0.0, bound - margin)
    nodes: list[ResourceNode] = []
    for i in range(count):
        nodes.append(
            ResourceNode(
                id=f"node-{i}",
                x=rng.uniform(-extent, extent),
                y=rng.uniform(-extent, extent),
                kind=rng.choice(MINERALS),
                amount=rng.randint(lo, hi),
                size=rng.uniform(*size_range),
            )
        )
    return nodes
