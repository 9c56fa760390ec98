from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.entities import (
    Biome,
    Colony,
    ColonyDna,
    ColonyNode,
    ColonyStyle,
    Limb,
    Segment,
    Temperament,
    Worm,
    WormType,
)
from ..types.events import EventKind
from ..utils.math2d import _clamp_value, _polar, _wrap_hue
from .shockwaves import decay_shockwaves, emit_shockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState

logger = logging.getLogger(__name__)

_TEMPERAMENTS = list(Temperament)
_BIOMES = list(Biome)
_STYLES = list(ColonyStyle)
_WORM_TYPES = list(WormType)


def new_colony(state: SimulationState, position: Vector2, hue: float | None = None) -> Colony:
    rng = state.rng
    config = state.config.colony
    if hue is None:
        hue = rng.next_range(0.0, 360.0)
    dna = ColonyDna(
        hue=_wrap_hue(hue),
        chaos=rng.next_range(0.55, 1.35),
        drift=rng.next_range(0.55, 1.35),
        aura=rng.next_range(0.95, 1.75),
        temperament=rng.sample_choice(_TEMPERAMENTS),
        biome=rng.sample_choice(_BIOMES),
        style=rng.sample_choice(_STYLES),
    )
    low, high = config.node_count
    nodes = [
        ColonyNode(
            offset=Vector2(
                rng.next_range(-config.node_offset, config.node_offset),
                rng.next_range(-config.node_offset, config.node_offset),
            ),
            radius=rng.next_range(55.0, 120.0),
            phase=rng.next_angle(),
            speed=rng.next_range(0.4, 1.2),
        )
        for _ in range(rng.next_int_inclusive(low, high))
    ]
    return Colony(
        id=rng.next_hex_id(4),
        position=Vector2(position),
        velocity=Vector2(
            rng.next_range(-config.initial_velocity, config.initial_velocity),
            rng.next_range(-config.initial_velocity, config.initial_velocity),
        ),
        dna=dna,
        nodes=nodes,
    )


def new_worm(state: SimulationState, colony: Colony, large: bool = False) -> Worm:
    rng = state.rng
    config = state.config.worm
    chaos = colony.dna.chaos
    segment_count = rng.next_int_inclusive(*(config.large_segment_count if large else config.segment_count))
    base_length = rng.next_range(*(config.large_segment_length if large else config.segment_length))
    worm = Worm(
        id=rng.next_hex_id(4).lower(),
        type=rng.sample_choice(_WORM_TYPES),
        hue=_wrap_hue(colony.dna.hue + rng.next_range(-config.hue_spread, config.hue_spread)),
        width=rng.next_range(*(config.large_width if large else config.width)),
        speed=rng.next_range(*(config.large_speed if large else config.speed)),
        turn_rate=rng.next_range(*config.turn_rate) * chaos,
        phase=rng.next_angle(),
        orbit_dir=rng.next_sign(),
        orbit_bias=rng.next_range(0.65, 1.35),
        orbit_tight=rng.next_range(0.7, 1.5),
    )

    position = colony.position + Vector2(
        rng.next_range(-config.spawn_spread, config.spawn_spread),
        rng.next_range(-config.spawn_spread, config.spawn_spread),
    )
    heading = rng.next_angle()
    for _ in range(max(2, segment_count)):
        worm.segments.append(
            Segment(position=Vector2(position), heading=heading, length=base_length * rng.next_range(0.85, 1.22))
        )
        position = position - _polar(heading, base_length)
        heading += rng.next_range(-0.3, 0.3) * chaos
    return worm


def add_limb(state: SimulationState, worm: Worm, large: bool = False) -> Limb | None:
    if not worm.segments:
        return None
    rng = state.rng
    config = state.config.worm
    last = len(worm.segments) - 1
    low = min(2, last)
    high = max(low, last - 2)
    limb = Limb(
        attachment_index=rng.next_int_inclusive(low, high),
        length=rng.next_range(*(config.large_limb_length if large else config.limb_length)),
        angle=rng.next_range(-1.3, 1.3),
        wobble_rate=rng.next_range(0.7, 1.6),
    )
    worm.limbs.append(limb)
    return limb


def seed_root_colony(state: SimulationState) -> Colony:
    root = new_colony(state, Vector2(), state.config.colony.root_hue)
    root.worms.append(new_worm(state, root, False))
    root.worms.append(new_worm(state, root, False))
    root.worms.append(new_worm(state, root, True))
    state.colonies.append(root)
    return root


def starter_count(state: SimulationState) -> int:
    config = state.config.colony
    return int(_clamp_value(math.floor(2 + state.growth_score() / 2), config.starters_min, config.starters_max))


def try_split(state: SimulationState) -> int:
    """Spawn one colony per market-cap threshold crossed, up to the cap."""
    config = state.config.colony
    rng = state.rng
    created = 0
    if not state.colonies:
        return created
    while (
        state.economy.market_cap >= state.next_split_threshold
        and len(state.colonies) < config.max_colonies
    ):
        base = state.colonies[0]
        offset = _polar(rng.next_angle(), rng.next_range(config.split_distance_min, config.split_distance_max))
        colony = new_colony(
            state,
            base.position + offset,
            base.dna.hue + rng.next_range(-config.split_hue_spread, config.split_hue_spread),
        )
        for _ in range(starter_count(state)):
            colony.worms.append(new_worm(state, colony, rng.chance(config.starter_large_chance)))
        emit_shockwave(colony, 1.1, state.config.shockwave)
        state.colonies.append(colony)
        logger.info("colony %s split off at threshold %.0f", colony.id, state.next_split_threshold)
        state.events.emit(EventKind.EVENT, f"New colony spawned at ${state.next_split_threshold:,.0f} MC")
        state.next_split_threshold += config.split_step
        created += 1
    return created


def drift_colonies(state: SimulationState) -> None:
    config = state.config.colony
    rng = state.rng
    for colony in state.colonies:
        colony.velocity.x += rng.next_range(-config.drift_jitter, config.drift_jitter) * colony.dna.drift
        colony.velocity.y += rng.next_range(-config.drift_jitter, config.drift_jitter) * colony.dna.drift
        colony.velocity *= config.velocity_damping
        colony.position += colony.velocity
        decay_shockwaves(colony, state.config.shockwave)
