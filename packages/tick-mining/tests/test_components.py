"""Tests for Cargo, Stats, ResourceNode and ResourceField."""
import random

import pytest

from tick_mining import (
    Cargo,
    ResourceField,
    ResourceNode,
    Stats,
    UnknownNodeError,
    default_catalog,
    generate_nodes,
)


def _cargo(**held: int) -> Cargo:
    caps = {"nickel": 100, "cobalt": 50, "copper": 50, "manganese": 25}
    base = {"nickel": 0, "cobalt": 0, "copper": 0, "manganese": 0}
    base.update(held)
    return Cargo(held=base, capacity=caps)


class TestCargo:
    def test_add_within_capacity(self) -> None:
        cargo = _cargo()
        assert cargo.add("nickel", 30) == 30
        assert cargo.used("nickel") == 30
        assert cargo.remaining("nickel") == 70

    def test_add_clamps_to_capacity(self) -> None:
        cargo = _cargo(manganese=20)
        assert cargo.add("manganese", 10) == 5
        assert cargo.used("manganese") == 25
        assert cargo.remaining("manganese") == 0

    def test_add_negative_raises(self) -> None:
        with pytest.raises(ValueError):
            _cargo().add("nickel", -1)

    def test_add_unknown_mineral(self) -> None:
        with pytest.raises(ValueError, match="Unknown mineral"):
            _cargo().add("gold", 1)

    def test_totals_and_full(self) -> None:
        cargo = _cargo(nickel=100, cobalt=50, copper=50)
        assert cargo.total_capacity() == 225
        assert cargo.total_used() == 200
        assert not cargo.is_full()
        cargo.add("manganese", 25)
        assert cargo.is_full()
        assert cargo.fill_percentage() == 100

    def test_fill_percentage_rounds(self) -> None:
        cargo = _cargo(nickel=10)
        assert cargo.fill_percentage() == round(10 / 225 * 100)

    def test_deduct_all_or_nothing(self) -> None:
        cargo = _cargo(nickel=5, cobalt=1)
        assert cargo.deduct({"nickel": 3, "cobalt": 2}) is False
        assert cargo.resources()["nickel"] == 5
        assert cargo.deduct({"nickel": 3, "cobalt": 1}) is True
        assert cargo.resources() == {"nickel": 2, "cobalt": 0, "copper": 0, "manganese": 0}

    def test_clear(self) -> None:
        cargo = _cargo(nickel=5, copper=4)
        cargo.clear()
        assert cargo.total_used() == 0
        assert cargo.total_capacity() == 225


class TestStats:
    def test_from_base_fills_energy(self) -> None:
        base = default_catalog().get(2).base_stats
        stats = Stats.from_base(2, base)
        assert stats.tier == 2
        assert stats.energy == stats.max_energy == 120
        assert stats.mining_rate == 1.2


class TestResourceNode:
    def test_zero_amount_is_depleted(self) -> None:
        node = ResourceNode("n", 0, 0, "nickel", 0)
        assert node.depleted

    def test_negative_amount_clamped(self) -> None:
        node = ResourceNode("n", 0, 0, "nickel", -3)
        assert node.amount == 0
        assert node.depleted

    def test_positive_amount_not_depleted_even_if_flagged(self) -> None:
        node = ResourceNode("n", 0, 0, "cobalt", 4, depleted=True)
        assert not node.depleted

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            ResourceNode("n", 0, 0, "unobtainium", 5)


class TestResourceField:
    def test_insertion_order(self) -> None:
        field = ResourceField(
            [ResourceNode("b", 0, 0, "nickel", 1), ResourceNode("a", 1, 1, "copper", 2)]
        )
        assert [n.id for n in field] == ["b", "a"]
        assert len(field) == 2

    def test_duplicate_id(self) -> None:
        field = ResourceField([ResourceNode("a", 0, 0, "nickel", 1)])
        with pytest.raises(ValueError, match="Duplicate"):
            field.add(ResourceNode("a", 5, 5, "cobalt", 1))

    def test_get_unknown(self) -> None:
        with pytest.raises(UnknownNodeError) as info:
            ResourceField().get("missing")
        assert info.value.node_id == "missing"

    def test_extract_partial(self) -> None:
        field = ResourceField([ResourceNode("a", 0, 0, "nickel", 10)])
        assert field.extract("a", 6) == 6
        node = field.get("a")
        assert node.amount == 4
        assert not node.depleted

    def test_extract_depletes(self) -> None:
        field = ResourceField([ResourceNode("a", 0, 0, "nickel", 3)])
        assert field.extract("a", 10) == 3
        assert field.get("a").depleted
        assert field.extract("a", 1) == 0
        assert field.get("a").amount == 0
        assert field.active() == []

    def test_remaining_totals(self) -> None:
        field = ResourceField(
            [
                ResourceNode("a", 0, 0, "nickel", 3),
                ResourceNode("b", 0, 0, "nickel", 4),
                ResourceNode("c", 0, 0, "copper", 2),
            ]
        )
        assert field.remaining() == {"nickel": 7, "cobalt": 0, "copper": 2, "manganese": 0}


class TestGenerateNodes:
    def test_reference_shape(self) -> None:
        nodes = generate_nodes(random.Random(7))
        assert len(nodes) == 30
        assert len({n.id for n in nodes}) == 30
        for node in nodes:
            assert 5 <= node.amount <= 20
            assert 15 <= node.size <= 25
            assert -25 <= node.x <= 25
            assert -25 <= node.y <= 25
            assert not node.depleted

    def test_deterministic_for_seed(self) -> None:
        a = generate_nodes(random.Random(3), count=5)
        b = generate_nodes(random.Random(3), count=5)
        assert a == b

    def test_negative_count(self) -> None:
        with pytest.raises(ValueError):
            generate_nodes(random.Random(1), count=-1)
