from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.config import ShockwaveConfig
from ..core.entities import Colony, Shockwave
from ..core.state import ScheduledShockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState


def emit_shockwave(colony: Colony, strength: float = 1.0, config: ShockwaveConfig | None = None) -> Shockwave:
    config = config or ShockwaveConfig()
    wave = Shockwave(
        radius=0.0,
        growth_rate=config.base_growth + strength * config.growth_per_strength,
        alpha=config.initial_alpha,
        width=config.base_width + strength,
    )
    colony.shockwaves.append(wave)
    return wave


def giant_shockwave(state: SimulationState, colony: Colony) -> None:
    """Layered blast: the first ring now, the rest queued behind it."""
    config = state.config.shockwave
    for delay, strength in config.giant_layers:
        if delay <= 0.0:
            emit_shockwave(colony, strength, config)
        else:
            state.scheduled_shockwaves.append(ScheduledShockwave(colony=colony, strength=strength, delay=delay))


def resolve_scheduled(state: SimulationState, dt: float) -> int:
    fired = 0
    pending = []
    for item in state.scheduled_shockwaves:
        item.delay -= dt
        if item.delay <= 0.0:
            emit_shockwave(item.colony, item.strength, state.config.shockwave)
            fired += 1
        else:
            pending.append(item)
    state.scheduled_shockwaves[:] = pending
    return fired


def decay_shockwaves(colony: Colony, config: ShockwaveConfig | None = None) -> None:
    config = config or ShockwaveConfig()
    for wave in colony.shockwaves:
        wave.radius += wave.growth_rate
        wave.alpha *= config.decay
    colony.shockwaves[:] = [wave for wave in colony.shockwaves if wave.alpha > config.min_alpha]
