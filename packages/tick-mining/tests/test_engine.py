"""Tests for the clock and engine stepping in virtual time."""

import pytest

from tick_mining import Clock, Engine, MiningConfig, Session


def _engine(tick_ms: float = 16.0, seed: int = 42) -> Engine:
    return Engine(Session(config=MiningConfig(tick_ms=tick_ms)), seed=seed)


# --- Clock ---

def test_clock_dt_and_elapsed():
    clock = Clock(tick_ms=100.0)
    assert clock.dt == 0.1
    clock.advance()
    clock.advance()
    assert clock.tick_number == 2
    assert clock.elapsed == pytest.approx(0.2)


def test_clock_ticks_for():
    clock = Clock(tick_ms=16.0)
    assert clock.ticks_for(2000) == 125
    assert clock.ticks_for(1) == 1


def test_clock_rejects_non_positive_tick():
    with pytest.raises(ValueError):
        Clock(tick_ms=0)


# --- Engine ---

def test_engine_uses_session_tick_length():
    engine = _engine(tick_ms=50.0)
    assert engine.clock.tick_ms == 50.0
    assert engine.clock.tick_number == 0


def test_systems_receive_session_and_run_in_order():
    engine = _engine()
    order = []
    engine.add_system(lambda s, ctx: order.append(("a", ctx.tick_number, s)))
    engine.add_system(lambda s, ctx: order.append(("b", ctx.tick_number, s)))
    engine.step()
    assert order == [("a", 1, engine.session), ("b", 1, engine.session)]


def test_run_n_ticks():
    engine = _engine()
    calls = []
    engine.add_system(lambda s, ctx: calls.append(ctx.tick_number))
    assert engine.run(5) == 5
    assert calls == [1, 2, 3, 4, 5]


def test_run_for_converts_ms():
    engine = _engine(tick_ms=100.0)
    assert engine.run_for(2000) == 20
    assert engine.clock.tick_number == 20
    assert engine.clock.elapsed == pytest.approx(2.0)


def test_request_stop_ends_run():
    engine = _engine()

    def stopper(s, ctx):
        if ctx.tick_number == 3:
            ctx.request_stop()

    engine.add_system(stopper)
    assert engine.run(10) == 3
    assert engine.clock.tick_number == 3


def test_request_stop_skips_later_systems():
    engine = _engine()
    later = []
    engine.add_system(lambda s, ctx: ctx.request_stop())
    engine.add_system(lambda s, ctx: later.append(ctx.tick_number))
    assert engine.step() is False
    assert later == []


def test_stop_request_lasts_one_tick():
    engine = _engine()
    engine.add_system(lambda s, ctx: ctx.tick_number == 1 and ctx.request_stop())
    assert engine.step() is False
    assert engine.step() is True
    assert engine.run(4) == 4


def test_seeded_rng_is_deterministic():
    a = _engine(seed=7)
    b = _engine(seed=7)
    assert a.seed == 7
    assert [a.random.random() for _ in range(3)] == [b.random.random() for _ in range(3)]


def test_random_seed_when_unseeded():
    engine = Engine(Session())
    assert isinstance(engine.seed, int)
