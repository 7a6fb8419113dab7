"""Tests for tier upgrades."""
from tick_mining import (
    BaseStats,
    Engine,
    GameState,
    MiningConfig,
    Session,
    TierCatalog,
    TierDefinition,
    Trigger,
    UpgradeCost,
    UpgradeProcessor,
    UpgradeStatus,
    make_timer_system,
)
from tick_mining.signals import (
    UPGRADE_FAILED,
    UPGRADE_STARTED,
    UPGRADE_UNAVAILABLE,
    UPGRADED,
    make_signal_system,
)

CFG = MiningConfig(tick_ms=100.0)


def _setup(
    tier: int = 1,
    balance: float = 0.0,
    config: MiningConfig = CFG,
    catalog: TierCatalog | None = None,
) -> tuple[Engine, Session, UpgradeProcessor]:
    session = Session(config=config, catalog=catalog, tier=tier, balance=balance)
    upgrades = UpgradeProcessor(session)
    engine = Engine(session, seed=42)
    engine.add_system(make_timer_system(session.timers))
    engine.add_system(make_signal_system(session.bus))
    return engine, session, upgrades


def _mineral_catalog() -> TierCatalog:
    caps1 = {"nickel": 20, "cobalt": 10, "copper": 10, "manganese": 5}
    caps2 = {"nickel": 40, "cobalt": 20, "copper": 20, "manganese": 10}
    return TierCatalog(
        [
            TierDefinition(1, "Skiff", BaseStats(50, caps1, 100, 1.0, 1.0)),
            TierDefinition(
                2,
                "Cutter",
                BaseStats(80, caps2, 200, 1.5, 1.5),
                UpgradeCost(nickel=10, cobalt=5, tokens=25),
            ),
        ]
    )


class TestStatus:
    def test_max_tier_regardless_of_wealth(self) -> None:
        _, session, upgrades = _setup(tier=15, balance=1e9)
        session.cargo.held.update(session.cargo.capacity)
        assert upgrades.status() is UpgradeStatus.MAX_TIER
        assert upgrades.status(16) is UpgradeStatus.MAX_TIER

    def test_unaffordable(self) -> None:
        _, _, upgrades = _setup(balance=199)
        assert upgrades.status() is UpgradeStatus.UNAFFORDABLE

    def test_available_at_exact_cost(self) -> None:
        _, _, upgrades = _setup(balance=200)
        assert upgrades.status() is UpgradeStatus.AVAILABLE

    def test_invalid_targets(self) -> None:
        _, _, upgrades = _setup(tier=3, balance=1e6)
        assert upgrades.status(3) is UpgradeStatus.INVALID_TARGET
        assert upgrades.status(2) is UpgradeStatus.INVALID_TARGET
        assert upgrades.status(99) is UpgradeStatus.INVALID_TARGET

    def test_busy(self) -> None:
        _, session, upgrades = _setup(balance=1e6)
        session.fsm.begin(Trigger.MINE)
        assert upgrades.status() is UpgradeStatus.BUSY

    def test_options(self) -> None:
        _, _, upgrades = _setup(tier=13, balance=9000)
        options = upgrades.options()
        assert [o.definition.tier for o in options] == [14, 15]
        assert [o.status for o in options] == [
            UpgradeStatus.AVAILABLE,
            UpgradeStatus.AVAILABLE,
        ]

    def test_options_empty_at_max(self) -> None:
        _, _, upgrades = _setup(tier=15)
        assert upgrades.options() == []


class TestRequest:
    def test_unaffordable_signals(self) -> None:
        engine, session, upgrades = _setup(balance=0)
        assert upgrades.request() is False
        assert session.state is GameState.IDLE
        engine.step()
        [(_, data)] = session.bus.delivered(UPGRADE_UNAVAILABLE)
        assert data["to_tier"] == 2

    def test_max_tier_is_silent_noop(self) -> None:
        engine, session, upgrades = _setup(tier=15, balance=1e6)
        assert upgrades.request() is False
        engine.step()
        assert session.bus.delivered(UPGRADE_UNAVAILABLE) == []
        assert session.state is GameState.IDLE

    def test_starts_upgrading(self) -> None:
        engine, session, upgrades = _setup(balance=200)
        assert upgrades.request() is True
        assert session.state is GameState.UPGRADING
        assert session.pending_tier == 2
        engine.step()
        assert len(session.bus.delivered(UPGRADE_STARTED)) == 1

    def test_nothing_changes_before_completion(self) -> None:
        engine, session, upgrades = _setup(balance=200)
        upgrades.request()
        engine.run(19)
        assert session.stats.tier == 1
        assert session.balance == 200


class TestCompletion:
    def test_exact_cost_upgrade(self) -> None:
        engine, session, upgrades = _setup(tier=3, balance=500)
        session.cargo.add("nickel", 120)
        session.cargo.add("manganese", 7)
        held = session.cargo.resources()
        assert upgrades.request() is True
        engine.run(20)
        tier4 = session.catalog.get(4).base_stats
        assert session.stats.tier == 4
        assert session.cargo.capacity == tier4.max_capacity
        assert session.cargo.resources() == held
        assert session.balance == 0
        assert session.stats.energy == session.stats.max_energy == tier4.energy
        assert session.stats.speed == tier4.speed
        assert session.state is GameState.UPGRADED
        engine.run(20)
        assert session.state is GameState.IDLE

    def test_upgraded_signal_reports_charge(self) -> None:
        engine, session, upgrades = _setup(balance=200)
        upgrades.request()
        engine.run(20)
        [(_, data)] = session.bus.delivered(UPGRADED)
        assert data["from_tier"] == 1
        assert data["to_tier"] == 2
        assert data["charged"] == {"tokens": 200}

    def test_skip_tiers(self) -> None:
        engine, session, upgrades = _setup(balance=750)
        assert upgrades.request(5) is True
        engine.run(20)
        assert session.stats.tier == 5
        assert session.balance == 0

    def test_without_charging(self) -> None:
        engine, session, upgrades = _setup(
            balance=200, config=MiningConfig(tick_ms=100.0, charge_upgrades=False)
        )
        upgrades.request()
        engine.run(20)
        assert session.stats.tier == 2
        assert session.balance == 200

    def test_minerals_and_tokens_deducted_together(self) -> None:
        engine, session, upgrades = _setup(balance=30, catalog=_mineral_catalog())
        session.cargo.add("nickel", 12)
        session.cargo.add("cobalt", 5)
        assert upgrades.request() is True
        engine.run(20)
        assert session.stats.tier == 2
        assert session.cargo.used("nickel") == 2
        assert session.cargo.used("cobalt") == 0
        assert session.balance == 5
        assert session.cargo.capacity["nickel"] == 40

    def test_recheck_failure_leaves_state_untouched(self) -> None:
        engine, session, upgrades = _setup(balance=30, catalog=_mineral_catalog())
        session.cargo.add("nickel", 12)
        session.cargo.add("cobalt", 5)
        upgrades.request()
        session.balance = 10
        engine.run(20)
        assert session.state is GameState.IDLE
        assert session.stats.tier == 1
        assert session.cargo.used("nickel") == 12
        assert session.balance == 10
        assert session.last_error is not None
        assert len(session.bus.delivered(UPGRADE_FAILED)) == 1
        assert session.bus.delivered(UPGRADED) == []

    def test_energy_rate_rederived(self) -> None:
        engine, session, upgrades = _setup(balance=200)
        first = session.regen.rate_for(session)
        upgrades.request()
        engine.run(20)
        assert session.regen.rate_tier == 0
        assert session.regen.rate_for(session) != first
        assert session.regen.rate_tier == 2

    def test_tier_only_moves_up(self) -> None:
        engine, session, upgrades = _setup(balance=1e6)
        seen = [session.stats.tier]
        for target in (3, 2, 7, 7, 15):
            upgrades.request(target)
            engine.run(40)
            seen.append(session.stats.tier)
        assert seen == sorted(seen)
        assert seen[-1] == 15
