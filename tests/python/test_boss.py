from __future__ import annotations

import math

from pytest import approx

from wormcolony.sim.core.config import SimulationConfig
from wormcolony.sim.core.rng import DeterministicRng
from wormcolony.sim.core.state import BossDashing, BossIdle, SimulationState
from wormcolony.sim.systems.boss import apply_dash, ensure_boss, start_dash, tick_dash_timer
from wormcolony.sim.systems.registry import seed_root_colony
from wormcolony.sim.types.events import EventKind


def _boss_state(seed: int = 3) -> SimulationState:
    state = SimulationState(config=SimulationConfig(), rng=DeterministicRng(seed))
    seed_root_colony(state)
    state.economy.market_cap = 50_000.0
    return state


def test_boss_needs_threshold():
    state = _boss_state()
    state.economy.market_cap = 49_999.0
    assert ensure_boss(state) is None
    assert all(not worm.is_boss for worm in state.colonies[0].worms)


def test_ensure_boss_is_idempotent():
    state = _boss_state()
    seen = []
    state.events.subscribe(seen.append)

    first = ensure_boss(state)
    second = ensure_boss(state)

    assert first is second
    bosses = [worm for worm in state.colonies[0].worms if worm.is_boss]
    assert len(bosses) == 1
    boss = bosses[0]
    assert boss.hue == 120.0
    assert len(boss.limbs) == 4
    assert 7.0 * 1.6 <= boss.width <= 11.0 * 1.6
    assert isinstance(first.phase, BossIdle)
    assert 8.0 <= first.phase.countdown <= 14.0
    assert [event.kind for event in seen] == [EventKind.BOSS]
    assert len(state.colonies[0].shockwaves) == 1


def test_countdown_starts_dash():
    state = _boss_state()
    boss = ensure_boss(state)
    seen = []
    state.events.subscribe(seen.append)
    boss.phase.countdown = 0.01

    tick_dash_timer(state, 1.0 / 60.0)

    assert isinstance(boss.phase, BossDashing)
    assert boss.dashing
    assert boss.dashes == 1
    assert 0.55 <= boss.phase.time_left <= 0.85
    assert 680.0 <= boss.phase.velocity.length() <= 980.0
    assert [event.message for event in seen] == ["Boss worm CHARGE DASH"]
    # emerge ring plus the first giant layer; the other two are queued
    assert len(state.colonies[0].shockwaves) == 2
    assert [item.delay for item in state.scheduled_shockwaves] == [0.04, 0.09]


def test_timer_ignored_while_dashing():
    state = _boss_state()
    boss = ensure_boss(state)
    start_dash(state)
    time_left = boss.phase.time_left

    tick_dash_timer(state, 5.0)

    assert boss.phase.time_left == time_left
    assert boss.dashes == 1


def test_dash_velocity_decays():
    state = _boss_state()
    boss = ensure_boss(state)
    start_dash(state)
    colony = state.colonies[0]
    dt = 1.0 / 60.0
    speed = boss.phase.velocity.length()

    apply_dash(state, colony, dt)

    assert boss.phase.velocity.length() <= speed * math.pow(0.10, dt) + 1e-9


def test_dash_moves_head_outward():
    state = _boss_state()
    boss = ensure_boss(state)
    start_dash(state)
    colony = state.colonies[0]
    start = boss.worm.head.position.copy()
    velocity = boss.phase.velocity.copy()

    apply_dash(state, colony, 1.0 / 60.0)

    moved = boss.worm.head.position - start
    assert moved.length() == approx(velocity.length() / 60.0, rel=1e-6)


def test_dash_returns_to_idle_with_closing_ring():
    state = _boss_state()
    boss = ensure_boss(state)
    start_dash(state)
    colony = state.colonies[0]
    waves_before = len(colony.shockwaves)

    for _ in range(120):
        if not boss.dashing:
            break
        apply_dash(state, colony, 1.0 / 60.0)

    assert isinstance(boss.phase, BossIdle)
    assert 8.0 <= boss.phase.countdown <= 14.0
    assert len(colony.shockwaves) == waves_before + 1
    assert colony.shockwaves[-1].width == approx(2.0 + 1.2)


def test_dash_leash_pulls_back():
    state = _boss_state()
    boss = ensure_boss(state)
    start_dash(state)
    colony = state.colonies[0]
    limit = 520.0 + 120.0 * colony.dna.aura
    boss.worm.head.position.update(colony.position.x + limit + 500.0, colony.position.y)
    boss.phase.velocity.update(0.0, 0.0)

    apply_dash(state, colony, 1.0 / 60.0)

    distance = boss.worm.head.position.distance_to(colony.position)
    assert distance == approx((limit + 500.0) * 0.94)
