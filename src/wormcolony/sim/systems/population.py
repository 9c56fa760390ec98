from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..core.entities import Worm
from ..types.events import EventKind
from ..utils.math2d import _clamp_value
from .registry import new_worm
from .shockwaves import emit_shockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState


def target_population(state: SimulationState) -> int:
    config = state.config.population
    target = math.floor(config.base_target + state.growth_score() * config.growth_target_slope)
    return int(_clamp_value(target, config.base_target, config.max_target))


def spawn_interval(state: SimulationState) -> float:
    config = state.config.population
    return _clamp_value(
        config.max_interval - state.growth_score() * config.growth_interval_slope,
        config.min_interval,
        config.max_interval,
    )


def maybe_spawn(state: SimulationState, dt: float) -> Worm | None:
    """Hatch at most one worm when the population is below target.

    The timer only runs while below target; the busier the economy, the
    shorter the wait.
    """
    if state.total_worms() >= target_population(state):
        return None
    state.spawn_timer += dt
    if state.spawn_timer < spawn_interval(state):
        return None
    colony = state.selected_colony()
    if colony is None:
        return None
    state.spawn_timer = 0.0
    config = state.config.population
    worm = new_worm(state, colony, state.rng.chance(config.large_chance))
    colony.worms.append(worm)
    state.hatches += 1
    if state.rng.chance(config.shockwave_chance):
        emit_shockwave(colony, config.shockwave_strength, state.config.shockwave)
    state.events.emit(EventKind.HATCH, "New worm hatched")
    return worm
