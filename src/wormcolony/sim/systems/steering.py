from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..core.config import SteeringConfig
from ..core.entities import Colony, Worm, WormType
from ..core.rng import DeterministicRng
from ..utils.math2d import _clamp_value, _heading_between, _lerp_angle, _polar
from . import boss as boss_system
from .chain import relax_chain

if TYPE_CHECKING:
    from ..core.state import SimulationState

# (orbit mix, steer mix); the orbit mix is scaled by the worm's orbit bias.
_BASE_MIX = {
    WormType.DRIFTER: (0.10, 0.08),
    WormType.ORBITER: (0.20, 0.07),
    WormType.HUNTER: (0.14, 0.10),
}


def preferred_radius(worm: Worm, colony: Colony, config: SteeringConfig) -> float:
    return config.orbit_radius * worm.orbit_tight + config.orbit_aura_radius * colony.dna.aura


def leash_radius(colony: Colony, config: SteeringConfig) -> float:
    return config.leash_radius + config.leash_aura_radius * colony.dna.aura


def ring_pull(distance: float, preferred: float) -> float:
    if preferred <= 1e-9:
        return 1.0
    return _clamp_value((distance - preferred) / preferred, -1.0, 1.0)


def desired_heading(worm: Worm, colony: Colony, sim_time: float, distance: float, config: SteeringConfig) -> tuple[float, float]:
    """Blend of approach and tangential headings around the colony.

    Returns ``(desired, turn_rate)``. Worms outside their preferred ring lean
    toward the approach heading; worms inside lean tangential.
    """
    head = worm.head
    toward = _heading_between(head.position, colony.position)
    tangent = toward + worm.orbit_dir * (math.pi * 0.5)
    orbit_mix, steer_mix = _BASE_MIX[worm.type]
    orbit_mix *= worm.orbit_bias

    pull = ring_pull(distance, preferred_radius(worm, colony, config))
    toward_bias = _clamp_value(0.10 + pull * 0.10, 0.02, 0.22)
    tangent_bias = _clamp_value(0.16 - pull * 0.10, 0.06, 0.30)

    wobble = config.hunter_wobble if worm.type == WormType.HUNTER else config.default_wobble
    desired = _lerp_angle(toward, tangent, _clamp_value(orbit_mix + tangent_bias, 0.0, 0.55))
    desired += math.sin(sim_time * config.desire_frequency + worm.phase) * wobble
    return desired, _clamp_value(steer_mix + toward_bias, 0.06, 0.28)


def steer_worm(
    worm: Worm,
    colony: Colony,
    sim_time: float,
    rng: DeterministicRng,
    config: SteeringConfig,
) -> float:
    """Turn and advance the head.

    Returns the head's distance from the colony measured before the move,
    which is what the leash compares against.
    """
    head = worm.head
    jitter = math.sin(sim_time * config.jitter_frequency + worm.phase) * config.jitter_wobble
    head.heading += (rng.next_float() - 0.5) * worm.turn_rate + jitter

    distance = head.position.distance_to(colony.position)
    desired, rate = desired_heading(worm, colony, sim_time, distance, config)
    head.heading = _lerp_angle(head.heading, desired, rate)

    boost = config.boss_boost if worm.is_boss else 1.0
    head.position += _polar(head.heading, worm.speed * config.speed_factor * boost)
    return distance


def apply_leash(worm: Worm, colony: Colony, distance: float, config: SteeringConfig) -> bool:
    limit = leash_radius(colony, config)
    if distance <= limit:
        return False
    head = worm.head
    overage = (distance - limit) / limit
    pull = min(1.0, config.leash_pull + overage * config.leash_overage_pull)
    head.position.update(head.position.lerp(colony.position, pull))
    toward = _heading_between(head.position, colony.position)
    head.heading = _lerp_angle(head.heading, toward + worm.orbit_dir * config.leash_turn_offset, config.leash_turn_rate)
    return True


def update_worms(state: SimulationState, dt: float) -> None:
    config = state.config.steering
    boss = state.boss
    for colony in state.colonies:
        for worm in colony.worms:
            if len(worm.segments) < 2:
                continue
            distance = steer_worm(worm, colony, state.sim_time, state.rng, config)
            if boss is not None and worm is boss.worm and boss.dashing:
                boss_system.apply_dash(state, colony, dt)
            apply_leash(worm, colony, distance, config)
            relax_chain(worm, state.config.chain.follow)
