from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    colonies: int
    worms: int
    growth_score: float
    target_population: int
    hatches: int
    mutations: int
    shockwaves: int
    boss_present: bool
    boss_dashing: bool
    sim_time: float = 0.0
    tick_duration_ms: float = 0.0
