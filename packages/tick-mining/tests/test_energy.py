"""Tests for energy regeneration."""
import pytest

from tick_mining import (
    Engine,
    MiningConfig,
    Session,
    Stats,
    fill_time_seconds,
    make_energy_system,
    regen_per_second,
)
from tick_mining.signals import ENERGY_FULL, make_signal_system


def _setup(policy: str = "depleted", energy: float = 0.0) -> tuple[Engine, Session]:
    """Tier 1 refills in 10s: 10 energy per 10-tick interval."""
    cfg = MiningConfig(
        tick_ms=100.0,
        min_fill_seconds=10,
        max_fill_seconds=20,
        energy_regen_policy=policy,
    )
    session = Session(config=cfg)
    session.stats.energy = energy
    engine = Engine(session, seed=42)
    engine.add_system(make_energy_system())
    engine.add_system(make_signal_system(session.bus))
    return engine, session


class TestFillTime:
    def test_reference_endpoints(self) -> None:
        assert fill_time_seconds(1, 15, 1200, 2700) == 1200
        assert fill_time_seconds(15, 15, 1200, 2700) == 2700

    def test_linear_between_tiers(self) -> None:
        assert fill_time_seconds(8, 15, 1200, 2700) == pytest.approx(1950)

    def test_single_tier_catalog(self) -> None:
        assert fill_time_seconds(1, 1, 1200, 2700) == 1200

    def test_rate(self) -> None:
        assert regen_per_second(100, 1200) == pytest.approx(100 / 1200)

    def test_rate_requires_positive_fill(self) -> None:
        with pytest.raises(ValueError):
            regen_per_second(100, 0)


class TestRateCache:
    def test_reference_rate_for_tier_one(self) -> None:
        session = Session()
        assert session.regen.rate_for(session) == pytest.approx(100 / 1200)
        assert session.regen.rate_tier == 1

    def test_recomputed_when_tier_changes(self) -> None:
        session = Session()
        first = session.regen.rate_for(session)
        session.stats = Stats.from_base(15, session.catalog.get(15).base_stats)
        second = session.regen.rate_for(session)
        assert second == pytest.approx(1000 / 2700)
        assert second != first

    def test_invalidate(self) -> None:
        session = Session()
        session.regen.rate_for(session)
        session.regen.invalidate()
        assert session.regen.rate_tier == 0


class TestDepletedPolicy:
    def test_regenerates_on_interval_only(self) -> None:
        engine, session = _setup(energy=0.0)
        engine.run(9)
        assert session.stats.energy == 0.0
        engine.step()
        assert session.stats.energy == pytest.approx(10.0)

    def test_refills_to_max_and_signals(self) -> None:
        engine, session = _setup(energy=0.0)
        engine.run(100)
        assert session.stats.energy == pytest.approx(100.0)
        assert len(session.bus.delivered(ENERGY_FULL)) == 1
        assert session.regen.active is False

    def test_never_overshoots(self) -> None:
        engine, session = _setup(energy=0.0)
        engine.run(300)
        assert session.stats.energy == 100.0

    def test_partial_energy_does_not_regenerate(self) -> None:
        engine, session = _setup(energy=50.0)
        engine.run(50)
        assert session.stats.energy == 50.0

    def test_latch_holds_until_full(self) -> None:
        engine, session = _setup(energy=0.0)
        engine.run(30)
        assert session.stats.energy == pytest.approx(30.0)
        assert session.regen.active
        engine.run(10)
        assert session.stats.energy == pytest.approx(40.0)

    def test_gain_matches_rounded_interval(self) -> None:
        # 1000ms at 16ms ticks rounds to 62 ticks, i.e. 992ms of virtual time.
        cfg = MiningConfig(tick_ms=16.0, min_fill_seconds=10, max_fill_seconds=20)
        session = Session(config=cfg)
        session.stats.energy = 0.0
        engine = Engine(session, seed=42)
        engine.add_system(make_energy_system())
        engine.run(61)
        assert session.stats.energy == 0.0
        engine.step()
        assert session.stats.energy == pytest.approx(10.0 * 0.992)


class TestContinuousPolicy:
    def test_regenerates_from_partial(self) -> None:
        engine, session = _setup(policy="continuous", energy=50.0)
        engine.run(10)
        assert session.stats.energy == pytest.approx(60.0)

    def test_idle_when_full(self) -> None:
        engine, session = _setup(policy="continuous", energy=100.0)
        engine.run(30)
        assert session.stats.energy == 100.0
        assert session.bus.delivered(ENERGY_FULL) == []
