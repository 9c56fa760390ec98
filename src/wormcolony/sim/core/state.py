from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from pygame.math import Vector2

from .config import SimulationConfig
from .economy import EconomyState
from .entities import Colony, Worm
from .rng import DeterministicRng
from ..systems.events import EventBus


@dataclass(slots=True)
class BossIdle:
    countdown: float


@dataclass(slots=True)
class BossDashing:
    time_left: float
    velocity: Vector2
    heading: float


BossPhase = Union[BossIdle, BossDashing]


@dataclass(slots=True)
class BossState:
    worm: Worm
    phase: BossPhase
    colony_index: int = 0
    dashes: int = 0

    @property
    def dashing(self) -> bool:
        return isinstance(self.phase, BossDashing)


@dataclass(slots=True)
class ScheduledShockwave:
    colony: Colony
    strength: float
    delay: float


@dataclass
class SimulationState:
    """Everything one simulation owns. Systems receive this by reference."""

    config: SimulationConfig
    rng: DeterministicRng
    events: EventBus = field(default_factory=EventBus)
    economy: EconomyState = field(default_factory=EconomyState)
    colonies: List[Colony] = field(default_factory=list)
    boss: BossState | None = None
    scheduled_shockwaves: List[ScheduledShockwave] = field(default_factory=list)
    next_split_threshold: float = 0.0
    spawn_timer: float = 0.0
    mutation_timer: float = 0.0
    selected: int = 0
    sim_time: float = 0.0
    tick: int = 0
    hatches: int = 0
    mutations: int = 0

    def __post_init__(self) -> None:
        if self.next_split_threshold <= 0.0:
            self.next_split_threshold = self.config.colony.split_step

    def growth_score(self) -> float:
        return self.economy.growth_score(self.config.economy)

    def total_worms(self) -> int:
        return sum(len(colony.worms) for colony in self.colonies)

    def selected_colony(self) -> Colony | None:
        if 0 <= self.selected < len(self.colonies):
            return self.colonies[self.selected]
        return self.colonies[0] if self.colonies else None
