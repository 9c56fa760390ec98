from __future__ import annotations

from pygame.math import Vector2

from wormcolony.sim.core.config import MutationConfig, SimulationConfig
from wormcolony.sim.core.rng import DeterministicRng
from wormcolony.sim.core.state import SimulationState
from wormcolony.sim.systems.mutation import mutate_random, mutation_interval, tick_mutation
from wormcolony.sim.systems.registry import new_colony, new_worm, seed_root_colony


def _make_state(mutation: MutationConfig | None = None, seed: int = 1) -> SimulationState:
    config = SimulationConfig(mutation=mutation or MutationConfig())
    state = SimulationState(config=config, rng=DeterministicRng(seed))
    seed_root_colony(state)
    return state


def _all_worms(state: SimulationState):
    return [worm for colony in state.colonies for worm in colony.worms]


def test_traits_stay_in_range_over_many_mutations():
    state = _make_state(seed=2)
    for _ in range(800):
        assert mutate_random(state) is not None
        for worm in _all_worms(state):
            assert 3.5 <= worm.width <= 18.0
            assert 0.0 <= worm.hue < 360.0
            assert 0.0 < worm.speed <= state.config.mutation.speed_cap
    assert state.colonies[0].mutations == 800


def test_common_width_growth_is_capped_at_sixteen():
    config = MutationConfig(rare_chance=0.0, color_weight=0.0, speed_weight=0.0, width_weight=1.0)
    state = _make_state(config)
    for _ in range(200):
        worm = mutate_random(state)
        assert 3.5 <= worm.width <= 16.0
    assert max(worm.width for worm in _all_worms(state)) == 16.0


def test_rare_mutation_adds_limb_and_shockwave():
    config = MutationConfig(rare_chance=1.0)
    state = _make_state(config)
    colony = state.colonies[0]
    events = []
    state.events.subscribe(events.append)
    limbs_before = sum(len(worm.limbs) for worm in colony.worms)

    for _ in range(60):
        worm = mutate_random(state)
        assert worm.width <= 18.0

    assert sum(len(worm.limbs) for worm in colony.worms) == limbs_before + 60
    assert len(colony.shockwaves) == 60
    assert all(event.message.startswith("Rare mutation • Prism shift • Worm ") for event in events)
    assert max(worm.width for worm in colony.worms) == 18.0


def test_limb_attachment_stays_on_body():
    config = MutationConfig(rare_chance=0.0, color_weight=0.0, speed_weight=0.0, width_weight=0.0)
    state = _make_state(config)
    for _ in range(100):
        worm = mutate_random(state)
        for limb in worm.limbs:
            assert 2 <= limb.attachment_index <= len(worm.segments) - 3


def test_empty_colony_is_a_silent_no_op():
    state = SimulationState(config=SimulationConfig(), rng=DeterministicRng(3))
    assert mutate_random(state) is None

    state.colonies.append(new_colony(state, Vector2()))
    assert mutate_random(state) is None
    assert state.colonies[0].mutations == 0
    assert state.mutations == 0


def test_mutation_interval_shrinks_with_growth():
    state = _make_state()
    assert mutation_interval(state) == 2.1
    state.economy.market_cap = 200000.0  # growth 10
    assert abs(mutation_interval(state) - 1.3) < 1e-9
    state.economy.market_cap = 10_000_000.0
    assert mutation_interval(state) == 0.42


def test_mutation_timer_fires_on_cadence():
    state = _make_state(MutationConfig(fire_chance=1.0))
    assert tick_mutation(state, 1.0) is None
    assert tick_mutation(state, 1.0) is None
    assert tick_mutation(state, 0.2) is not None
    assert state.mutation_timer == 0.0
    assert state.mutations == 1


def test_new_worm_mutations_only_touch_the_chosen_colony():
    state = _make_state(seed=5)
    other = new_colony(state, Vector2(300.0, 0.0))
    other.worms.append(new_worm(state, other))
    state.colonies.append(other)
    for _ in range(100):
        mutate_random(state)
    assert state.colonies[0].mutations + other.mutations == 100
    assert state.colonies[0].mutations > 0
    assert other.mutations > 0
