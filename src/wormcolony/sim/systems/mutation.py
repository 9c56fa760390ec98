from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.entities import Worm
from ..types.events import EventKind
from ..utils.math2d import _clamp_value, _wrap_hue
from .registry import add_limb
from .shockwaves import emit_shockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState


def mutation_interval(state: SimulationState) -> float:
    config = state.config.mutation
    return _clamp_value(
        config.max_interval - state.growth_score() * config.growth_interval_slope,
        config.min_interval,
        config.max_interval,
    )


def mutate_random(state: SimulationState) -> Worm | None:
    """Apply one randomized trait edit to a random worm of a random colony.

    Returns the mutated worm, or ``None`` when the chosen colony has no
    worms (or there are no colonies at all).
    """
    rng = state.rng
    config = state.config.mutation
    colony = rng.sample_choice(state.colonies)
    if colony is None or not colony.worms:
        return None
    worm = rng.sample_choice(colony.worms)
    roll = rng.next_float()

    if rng.chance(config.rare_chance):
        worm.hue = _wrap_hue(worm.hue + rng.next_range(160.0, 260.0))
        worm.width = _clamp_value(worm.width * rng.next_range(1.10, 1.35), config.min_width, config.rare_max_width)
        worm.speed = min(config.speed_cap, worm.speed * rng.next_range(1.05, 1.20))
        add_limb(state, worm, True)
        colony.mutations += 1
        state.mutations += 1
        state.events.emit(EventKind.MUTATION, f"Rare mutation • Prism shift • Worm {worm.id}")
        emit_shockwave(colony, config.rare_shockwave_strength, state.config.shockwave)
        return worm

    color_cut = config.color_weight
    speed_cut = color_cut + config.speed_weight
    width_cut = speed_cut + config.width_weight
    if roll < color_cut:
        worm.hue = _wrap_hue(worm.hue + rng.next_range(30.0, 140.0))
        message = "Color shift"
    elif roll < speed_cut:
        worm.speed = min(config.speed_cap, worm.speed * rng.next_range(1.05, 1.25))
        message = "Aggression spike"
    elif roll < width_cut:
        worm.width = _clamp_value(worm.width * rng.next_range(1.05, 1.25), config.min_width, config.max_width)
        message = "Body growth"
    else:
        add_limb(state, worm, rng.chance(config.limb_large_chance))
        message = "Limb growth"
    state.events.emit(EventKind.MUTATION, f"{message} • Worm {worm.id}")

    colony.mutations += 1
    state.mutations += 1
    if rng.chance(config.shockwave_chance):
        emit_shockwave(colony, config.shockwave_strength, state.config.shockwave)
    return worm


def tick_mutation(state: SimulationState, dt: float) -> Worm | None:
    state.mutation_timer += dt
    if state.mutation_timer < mutation_interval(state):
        return None
    state.mutation_timer = 0.0
    if state.rng.chance(state.config.mutation.fire_chance):
        return mutate_random(state)
    return None
