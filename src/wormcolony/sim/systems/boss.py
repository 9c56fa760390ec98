from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from ..core.entities import Colony
from ..core.state import BossDashing, BossIdle, BossState
from ..types.events import EventKind
from ..utils.math2d import _heading_between, _lerp_angle, _polar
from .registry import add_limb, new_worm
from .shockwaves import emit_shockwave, giant_shockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState

logger = logging.getLogger(__name__)


def _roll_countdown(state: SimulationState) -> float:
    return state.rng.next_range(*state.config.boss.dash_interval)


def ensure_boss(state: SimulationState) -> BossState | None:
    """Create the boss once the market cap threshold is reached.

    Safe to call every tick; a second boss is never created.
    """
    if state.boss is not None:
        return state.boss
    config = state.config.boss
    if state.economy.market_cap < config.market_cap_threshold or not state.colonies:
        return None
    colony = state.colonies[0]
    worm = new_worm(state, colony, True)
    worm.is_boss = True
    worm.width *= config.width_multiplier
    worm.speed *= config.speed_multiplier
    worm.hue = config.hue
    for _ in range(config.limbs):
        add_limb(state, worm, True)
    colony.worms.append(worm)
    state.boss = BossState(worm=worm, phase=BossIdle(countdown=_roll_countdown(state)))
    emit_shockwave(colony, config.emerge_shockwave, state.config.shockwave)
    logger.info("boss %s attached to colony %s", worm.id, colony.id)
    state.events.emit(EventKind.BOSS, "Boss worm emerged")
    return state.boss


def start_dash(state: SimulationState) -> None:
    boss = state.boss
    if boss is None or not boss.worm.segments or not state.colonies:
        return
    rng = state.rng
    config = state.config.boss
    colony = state.colonies[boss.colony_index]
    head = boss.worm.head
    heading = _heading_between(colony.position, head.position) + rng.next_range(-config.dash_arc, config.dash_arc)
    velocity = _polar(heading, rng.next_range(*config.dash_impulse))
    boss.phase = BossDashing(
        time_left=rng.next_range(*config.dash_duration),
        velocity=velocity,
        heading=heading,
    )
    boss.dashes += 1
    if rng.chance(config.orbit_flip_chance):
        boss.worm.orbit_dir *= -1
    giant_shockwave(state, colony)
    state.events.emit(EventKind.DASH, "Boss worm CHARGE DASH")


def tick_dash_timer(state: SimulationState, dt: float) -> None:
    """Count down while idle and start a dash when the countdown runs out."""
    boss = state.boss
    if boss is None or not isinstance(boss.phase, BossIdle):
        return
    boss.phase.countdown -= dt
    if boss.phase.countdown <= 0.0:
        start_dash(state)


def _finish_dash(state: SimulationState, boss: BossState, colony: Colony) -> None:
    boss.phase = BossIdle(countdown=_roll_countdown(state))
    emit_shockwave(colony, state.config.boss.closing_shockwave, state.config.shockwave)


def apply_dash(state: SimulationState, colony: Colony, dt: float) -> None:
    """Layer the decaying dash impulse on top of this tick's steering."""
    boss = state.boss
    if boss is None or not isinstance(boss.phase, BossDashing):
        return
    dash = boss.phase
    if not boss.worm.segments:
        boss.phase = BossIdle(countdown=_roll_countdown(state))
        return
    config = state.config.boss
    head = boss.worm.head

    head.position += dash.velocity * dt
    dash.velocity *= math.pow(config.dash_decay_per_second, dt)
    head.heading = _lerp_angle(head.heading, dash.heading, config.dash_turn_rate)

    limit = config.dash_leash_radius + config.dash_leash_aura_radius * colony.dna.aura
    if head.position.distance_to(colony.position) > limit:
        head.position.update(head.position.lerp(colony.position, config.dash_leash_pull))
        dash.velocity *= config.dash_leash_damping

    dash.time_left -= dt
    if dash.time_left <= 0.0:
        _finish_dash(state, boss, colony)
