from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from wormcolony.sim.core.config import SimulationConfig
from wormcolony.sim.core.world import World
from wormcolony.sim.types.events import EventKind


def _boss_count(world: World) -> int:
    return sum(1 for colony in world.colonies for worm in colony.worms if worm.is_boss)


def test_initial_world_has_root_colony_with_three_worms():
    world = World(SimulationConfig(seed=1))
    assert len(world.colonies) == 1
    root = world.colonies[0]
    assert root.position == Vector2(0.0, 0.0)
    assert root.dna.hue == approx(150.0)
    assert len(root.worms) == 3
    assert world.boss is None
    assert world.state.next_split_threshold == approx(25000.0)


def test_deterministic_steps():
    def run(seed: int) -> list[tuple]:
        world = World(SimulationConfig(seed=seed))
        results = []
        for tick in range(300):
            if tick % 25 == 0:
                world.apply_action("smallBuy")
            metrics = world.step(tick)
            results.append((metrics.colonies, metrics.worms, metrics.hatches, metrics.mutations, metrics.shockwaves))
        heads = [tuple(worm.head.position) for colony in world.colonies for worm in colony.worms]
        return results + heads

    assert run(1234) == run(1234)


def test_single_split_at_first_threshold():
    world = World(SimulationConfig(seed=3))
    world.adjust_economy(market_cap=25000)
    world.step(0)

    assert len(world.colonies) == 2
    assert 2 <= len(world.colonies[1].worms) <= 7
    assert world.state.next_split_threshold == approx(50000.0)
    messages = [entry.message for entry in world.event_log.entries(EventKind.EVENT)]
    assert "New colony spawned at $25,000 MC" in messages


def test_new_colony_sits_within_split_distance_of_root():
    world = World(SimulationConfig(seed=8))
    root_position = Vector2(world.colonies[0].position)
    world.adjust_economy(market_cap=25000)
    world.step(0)
    # both colonies drift at most a fraction of a unit in one tick
    distance = world.colonies[1].position.distance_to(root_position)
    assert 239.0 <= distance <= 461.0


def test_colony_count_is_capped():
    world = World(SimulationConfig(seed=5))
    world.adjust_economy(market_cap=10_000_000)
    for tick in range(5):
        world.step(tick)
        assert 1 <= len(world.colonies) <= 16
    assert len(world.colonies) == 16
    assert world.state.next_split_threshold == approx(25000.0 * 16)


def test_boss_created_once():
    world = World(SimulationConfig(seed=4))
    world.adjust_economy(market_cap=50000)
    world.step(0)
    boss = world.boss
    assert boss is not None
    assert boss in world.colonies[0].worms
    assert _boss_count(world) == 1

    world.adjust_economy(market_cap=40000)
    for tick in range(1, 50):
        world.step(tick)
    assert world.boss is boss
    assert _boss_count(world) == 1
    assert len(world.event_log.entries(EventKind.BOSS)) == 1


def test_no_boss_below_threshold():
    world = World(SimulationConfig(seed=4))
    world.adjust_economy(market_cap=49999)
    for tick in range(20):
        world.step(tick)
    assert world.boss is None


def test_boss_dashes_over_time():
    world = World(SimulationConfig(seed=6))
    world.adjust_economy(market_cap=60000)
    dashes = []
    world.subscribe(lambda event: dashes.append(event) if event.kind == EventKind.DASH else None)
    for tick in range(400):
        world.step(tick, dt=0.05)
    assert len(dashes) >= 1
    assert world.state.boss.dashes == len(dashes)
    assert _boss_count(world) == 1


def test_frame_delta_is_capped_and_bad_deltas_skipped():
    world = World(SimulationConfig(seed=2, max_frame_dt=0.05))
    world.step(0, dt=10.0)
    assert world.state.sim_time == approx(0.05)
    world.step(1, dt=float("nan"))
    world.step(2, dt=-1.0)
    assert world.state.sim_time == approx(0.05)


def test_no_hatching_without_growth():
    world = World(SimulationConfig(seed=9))
    for tick in range(600):
        metrics = world.step(tick)
        assert metrics.target_population == 3
        assert metrics.hatches == 0
    assert world.state.total_worms() == 3


def test_hatching_respects_target_population():
    world = World(SimulationConfig(seed=10))
    world.adjust_economy(buyers=10)
    for tick in range(2000):
        metrics = world.step(tick)
        assert metrics.worms <= max(3, metrics.target_population)
    assert world.state.total_worms() == 5
    assert len(world.event_log.entries(EventKind.HATCH)) >= 1


def test_leash_pulls_far_worm_inward():
    world = World(SimulationConfig(seed=12))
    colony = world.colonies[0]
    colony.dna.aura = 1.0
    colony.velocity = Vector2()
    worm = colony.worms[0]
    worm.head.position.update(colony.position.x + 400.0, colony.position.y)

    world.step(0)

    assert worm.head.position.distance_to(colony.position) < 400.0


def test_select_colony():
    world = World(SimulationConfig(seed=13))
    assert world.select_colony(3) is False
    assert world.selected_index == 0

    world.adjust_economy(market_cap=25000)
    world.step(0)
    assert world.select_colony(1) is True
    assert world.selected_index == 1
    newest = world.event_log.entries(EventKind.EVENT)[0]
    assert newest.message.startswith("Selected Colony #2 • ")


def test_trigger_mutation_counts_on_colony():
    world = World(SimulationConfig(seed=14))
    mutated = world.trigger_mutation()
    assert mutated is not None
    assert world.colonies[0].mutations == 1
    assert len(world.event_log.entries(EventKind.MUTATION)) == 1


def test_reset_restores_seeded_start():
    config = SimulationConfig(seed=21)
    world = World(config)
    world.adjust_economy(market_cap=80000, buyers=4)
    for tick in range(100):
        world.step(tick)
    world.reset()

    assert len(world.colonies) == 1
    assert world.boss is None
    assert world.economy.market_cap == 0.0
    assert len(world.event_log) == 0

    fresh = World(SimulationConfig(seed=21))
    for tick in range(30):
        world.step(tick)
        fresh.step(tick)
    heads = [tuple(worm.head.position) for worm in world.colonies[0].worms]
    fresh_heads = [tuple(worm.head.position) for worm in fresh.colonies[0].worms]
    assert heads == fresh_heads


def test_snapshot_contains_metadata_and_worm_geometry():
    world = World(SimulationConfig(seed=7, time_step=0.02))
    world.step(0)
    snapshot = world.snapshot(1)

    assert snapshot.metadata.sim_dt == approx(0.02)
    assert snapshot.metadata.tick_rate == approx(50.0)
    assert snapshot.metadata.render_rate == approx(40.0)
    assert snapshot.metadata.seed == 7
    assert snapshot.metrics.worms == 3
    assert snapshot.boss is None
    assert snapshot.economy.growth_score == 0.0

    colony = snapshot.colonies[0]
    for key in ["id", "x", "y", "dna", "nodes", "worms", "shockwaves", "mutations"]:
        assert key in colony
    assert 4 <= len(colony["nodes"]) <= 7
    worm = colony["worms"][0]
    assert len(worm["segments"]) >= 2
    assert all(len(segment) == 3 for segment in worm["segments"])
    assert all(math.isfinite(value) for segment in worm["segments"] for value in segment)


def test_snapshot_reports_boss_phase():
    world = World(SimulationConfig(seed=7))
    world.adjust_economy(market_cap=50000)
    world.step(0)
    snapshot = world.snapshot(1)
    assert snapshot.boss is not None
    assert snapshot.boss["dashing"] is False
    assert 0.0 < snapshot.boss["countdown"] <= 14.0
