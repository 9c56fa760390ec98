from __future__ import annotations

from typing import TYPE_CHECKING

from ..types.metrics import TickMetrics
from .population import target_population

if TYPE_CHECKING:
    from ..core.state import SimulationState


def create_metrics(state: SimulationState, tick: int, hatches: int, mutations: int, duration_ms: float) -> TickMetrics:
    boss = state.boss
    return TickMetrics(
        tick=tick,
        colonies=len(state.colonies),
        worms=state.total_worms(),
        growth_score=state.growth_score(),
        target_population=target_population(state),
        hatches=hatches,
        mutations=mutations,
        shockwaves=sum(len(colony.shockwaves) for colony in state.colonies),
        boss_present=boss is not None,
        boss_dashing=boss is not None and boss.dashing,
        sim_time=state.sim_time,
        tick_duration_ms=duration_ms,
    )
